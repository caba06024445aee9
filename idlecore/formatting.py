from __future__ import annotations

from typing import TYPE_CHECKING

from idlecore.goal import GoalScope
from idlecore.modifier import Stat
from idlecore.offline import OfflineResult
from idlecore.prestige import PrestigeResult

if TYPE_CHECKING:
    from idlecore.runtime import EconomyRuntime

_SUFFIXES = [
    (1e12, "T", 2),
    (1e9, "B", 2),
    (1e6, "M", 2),
    (1e3, "K", 1),
]


def format_number(num: float) -> str:
    """Abbreviate *num* with K/M/B/T suffixes."""
    for threshold, suffix, places in _SUFFIXES:
        if num >= threshold:
            return f"{num / threshold:.{places}f}{suffix}"
    return f"{num:.0f}"


def format_status_report(runtime: EconomyRuntime) -> str:
    """Format the current economy state for console output."""
    lines: list[str] = []
    name = runtime.definition.config.name

    lines.append("=" * 30 + f" {name} " + "=" * 30)
    lines.append(f"Money:        {format_number(runtime.money())}")
    if runtime.dark_matter_unlocked:
        lines.append(f"Dark matter:  {format_number(runtime.dark_matter())}")
    else:
        lines.append("Dark matter:  locked")
    lines.append(f"Time shards:  {format_number(runtime.time_shards())}")
    lines.append(f"Prestige:     level {runtime.prestige.level}")
    lines.append(f"Helpers:      {runtime.helpers.count}/{runtime.helper_capacity()}")
    lines.append("")

    lines.append("UNITS:")
    for udef in runtime.units.definitions():
        owned = runtime.units.count(udef.tier)
        price = format_number(runtime.units.current_price(udef.tier))
        lines.append(f"  {udef.display_name:.<20s} {owned:>4d} owned, next {price}")
    lines.append("")

    lines.append("STATS:")
    for stat in (
        Stat.GLOBAL_MONEY_MULTIPLIER,
        Stat.DARK_MATTER_MULTIPLIER,
        Stat.UNIT_VALUE_BONUS,
        Stat.JACKPOT_CHANCE,
        Stat.OFFLINE_EFFICIENCY,
    ):
        lines.append(f"  {stat.name.lower():.<30s} {runtime.get_stat(stat):.3f}")
    lines.append("")

    lines.append("MILESTONES:")
    for prog in runtime.tracker.milestones():
        lines.append(_goal_line(runtime, prog.goal_id))
    for scope in (GoalScope.DAILY, GoalScope.WEEKLY):
        missions = runtime.tracker.missions(scope)
        if missions:
            lines.append("")
            lines.append(f"{scope.name} MISSIONS:")
            for prog in missions:
                lines.append(_goal_line(runtime, prog.goal_id))

    return "\n".join(lines)


def _goal_line(runtime: EconomyRuntime, goal_id: str) -> str:
    defn = runtime.tracker.get_definition(goal_id)
    prog = runtime.tracker.get_progress(goal_id)
    marker = {"ACTIVE": "  ", "COMPLETED": "  *", "CLAIMED": "  +"}[prog.status.name]
    return (
        f"{marker} {defn.display_name:.<30s} "
        f"{format_number(prog.current)}/{format_number(defn.target)}"
    )


def format_offline_report(result: OfflineResult) -> str:
    hours = result.elapsed_seconds / 3600.0
    lines = [f"Away for {hours:.1f}h ({result.cycles:.0f} cycles)"]
    lines.append(f"  Money earned:       {format_number(result.money)}")
    if result.dark_matter > 0:
        lines.append(f"  Dark matter earned: {format_number(result.dark_matter)}")
    return "\n".join(lines)


def format_prestige_preview(runtime: EconomyRuntime) -> str:
    money_req, dm_req = runtime.prestige.requirements()
    ready = "READY" if runtime.prestige.can_prestige() else "NOT READY"
    next_bonus = runtime.prestige.bonuses(runtime.prestige.level + 1)
    return "\n".join([
        f"Time Fracture (level {runtime.prestige.level}): {ready}",
        f"  Money:       {format_number(runtime.money())} / {format_number(money_req)}",
        f"  Dark matter: {format_number(runtime.dark_matter())} / {format_number(dm_req)}",
        f"  Reward:      {format_number(runtime.prestige.preview_reward())} time shards",
        f"  Next money multiplier: x{next_bonus.money_multiplier:.2f}",
    ])


def format_prestige_result(result: PrestigeResult) -> str:
    if not result.success:
        return f"Prestige failed: {result.reason}"
    text = (
        f"Prestiged to level {result.new_level}, "
        f"earned {format_number(result.reward_amount)} time shards"
    )
    if result.skipped_steps:
        text += f" (skipped: {', '.join(result.skipped_steps)})"
    return text
