"""MCP server wrapping EconomyRuntime for interactive playtesting."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from mcp.server.fastmcp import FastMCP

from idlecore.active_skills import ActiveSkillKind
from idlecore.definition import EconomyDefinition
from idlecore.events import EventRecorder, GoalCompleted, UnitDestroyed
from idlecore.goal import GoalScope
from idlecore.modifier import Stat
from idlecore.persistence import load_file, save_file
from idlecore.runtime import EconomyRuntime
from idlecore.units import UnitTier

# Maximum seconds per wait() or simulate_offline() call (24 hours)
_MAX_WAIT = 86400
# Maximum rolls per roll() call
_MAX_ROLLS = 1000


@dataclass
class _GameHolder:
    """Holds the active economy definition and runtime."""

    definition: EconomyDefinition
    runtime: EconomyRuntime
    save_path: str | None = None
    recorder: EventRecorder = field(init=False)

    def __post_init__(self) -> None:
        self.recorder = EventRecorder(
            self.runtime.bus, (GoalCompleted, UnitDestroyed)
        )

    def reset(self) -> None:
        self.recorder.close()
        self.runtime = EconomyRuntime(self.definition)
        self.__post_init__()

    def drain(self) -> dict[str, list]:
        """Goals completed and units destroyed since the last drain."""
        out = {
            "new_goals": [e.goal_id for e in self.recorder.of_type(GoalCompleted)],
            "destroyed_units": [
                e.unit_id for e in self.recorder.of_type(UnitDestroyed)
            ],
        }
        self.recorder.clear()
        return {k: v for k, v in out.items() if v}


def _parse_tier(name: str) -> UnitTier | None:
    try:
        return UnitTier[name.upper()]
    except KeyError:
        return None


def _goal_entry(runtime: EconomyRuntime, goal_id: str) -> dict[str, Any]:
    defn = runtime.tracker.get_definition(goal_id)
    prog = runtime.tracker.get_progress(goal_id)
    return {
        "id": goal_id,
        "display_name": defn.display_name,
        "metric": defn.metric.name,
        "current": round(prog.current, 2),
        "target": defn.target,
        "status": prog.status.name,
        "rewards": [
            {"type": r.type.name, "amount": r.amount, "duration": r.duration}
            for r in defn.rewards
        ],
    }


# ── Tool logic functions (testable without MCP protocol) ────────────


def _tool_get_economy_info(holder: _GameHolder) -> dict[str, Any]:
    defn = holder.definition
    return {
        "name": defn.config.name,
        "units": [
            {
                "tier": u.tier.name,
                "display_name": u.display_name,
                "base_payout": u.base_payout,
                "dm_per_roll": u.dm_per_roll,
            }
            for u in defn.units
        ],
        "skills": [
            {
                "id": s.id,
                "display_name": s.display_name,
                "cost": s.cost,
                "prerequisites": list(s.prerequisites),
                "unlocks": list(s.unlocks),
            }
            for s in defn.skills
        ],
        "milestones": [{"id": m.id, "target": m.target} for m in defn.milestones],
        "ascension_cost": defn.config.ascension_cost,
    }


def _tool_get_state(holder: _GameHolder) -> dict[str, Any]:
    rt = holder.runtime
    return {
        "time_elapsed": round(rt.time_elapsed, 2),
        "money": round(rt.money(), 2),
        "dark_matter": round(rt.dark_matter(), 2),
        "time_shards": round(rt.time_shards(), 2),
        "dark_matter_unlocked": rt.dark_matter_unlocked,
        "prestige_level": rt.prestige.level,
        "helpers": {"count": rt.helpers.count, "capacity": rt.helper_capacity()},
        "units": [
            {
                "id": u.id,
                "tier": u.tier.name,
                "overclock": rt.overclock.status(u.id).name,
            }
            for u in rt.units.list_units()
        ],
        "unit_prices": {
            u.tier.name: round(rt.units.current_price(u.tier), 2)
            for u in rt.units.definitions()
        },
        "unlocked_skills": rt.skills.list_unlocked(),
        "active_skills": {
            k.name: {
                "unlocked": rt.active_skills.is_unlocked(k),
                "cooldown": round(rt.active_skills.remaining_cooldown(k), 2),
            }
            for k in ActiveSkillKind
        },
        "daily_login": {
            "streak_day": rt.daily_login.streak_day,
            "can_claim": rt.daily_login.can_claim(),
        },
        "stats": {s.name: round(rt.get_stat(s), 4) for s in Stat},
    }


def _tool_get_goals(holder: _GameHolder) -> dict[str, Any]:
    rt = holder.runtime
    return {
        "milestones": [_goal_entry(rt, p.goal_id) for p in rt.tracker.milestones()],
        "daily": [
            _goal_entry(rt, p.goal_id) for p in rt.tracker.missions(GoalScope.DAILY)
        ],
        "weekly": [
            _goal_entry(rt, p.goal_id) for p in rt.tracker.missions(GoalScope.WEEKLY)
        ],
    }


def _tool_roll(holder: _GameHolder, count: int = 1) -> dict[str, Any]:
    if count < 1:
        return {"error": "Count must be at least 1"}
    if count > _MAX_ROLLS:
        return {"error": f"Count cannot exceed {_MAX_ROLLS}"}

    earned = 0.0
    dark_matter = 0.0
    jackpots = 0
    for _ in range(count):
        event = holder.runtime.roll()
        if event is None:
            break
        earned += event.amount
        dark_matter += event.dark_matter
        jackpots += int(event.is_bonus)
    result: dict[str, Any] = {
        "rolls": count,
        "money_earned": round(earned, 2),
        "dark_matter_earned": round(dark_matter, 2),
        "jackpots": jackpots,
        "money": round(holder.runtime.money(), 2),
    }
    result.update(holder.drain())
    return result


def _tool_buy_unit(holder: _GameHolder, tier: str) -> dict[str, Any]:
    unit_tier = _parse_tier(tier)
    if unit_tier is None or holder.definition.get_unit(unit_tier) is None:
        return {"error": f"Unknown unit tier: {tier!r}"}
    unit = holder.runtime.buy_unit(unit_tier)
    if unit is None:
        return {"success": False, "reason": "Cannot afford"}
    return {
        "success": True,
        "unit_id": unit.id,
        "owned": holder.runtime.units.count(unit_tier),
    }


def _tool_unlock_dark_matter(holder: _GameHolder) -> dict[str, Any]:
    rt = holder.runtime
    if rt.dark_matter_unlocked:
        return {"success": False, "reason": "Already unlocked"}
    if not rt.unlock_dark_matter():
        return {"success": False, "reason": "Cannot afford"}
    return {"success": True}


def _tool_buy_skill(holder: _GameHolder, skill_id: str) -> dict[str, Any]:
    rt = holder.runtime
    if holder.definition.get_skill(skill_id) is None:
        return {"error": f"Unknown skill: {skill_id!r}"}
    if rt.skills.is_unlocked(skill_id):
        return {"success": False, "reason": "Already unlocked"}
    if not rt.skills.prerequisites_met(skill_id):
        return {"success": False, "reason": "Prerequisites not met"}
    if not rt.buy_skill(skill_id):
        return {"success": False, "reason": "Cannot afford"}
    return {"success": True, "skill_id": skill_id}


def _tool_buy_helper(holder: _GameHolder) -> dict[str, Any]:
    rt = holder.runtime
    if rt.helpers.count >= rt.helper_capacity():
        return {"success": False, "reason": "Helper cap reached"}
    if not rt.buy_helper():
        return {"success": False, "reason": "Cannot afford"}
    return {"success": True, "helpers": rt.helpers.count}


def _tool_claim_goal(holder: _GameHolder, goal_id: str) -> dict[str, Any]:
    result = holder.runtime.claim_goal(goal_id)
    if not result.success:
        return {"success": False, "reason": result.reason}
    return {
        "success": True,
        "goal_id": goal_id,
        "rewards": [{"type": r.type.name, "amount": r.amount} for r in result.rewards],
    }


def _tool_overclock(holder: _GameHolder, unit_id: str) -> dict[str, Any]:
    result = holder.runtime.start_overclock(unit_id)
    if not result.success:
        return {"success": False, "reason": result.reason}
    return {"success": True, "unit_id": unit_id}


def _tool_preview_prestige(holder: _GameHolder) -> dict[str, Any]:
    p = holder.runtime.prestige
    money_req, dm_req = p.requirements()
    return {
        "level": p.level,
        "can_prestige": p.can_prestige(),
        "money_required": round(money_req, 2),
        "dark_matter_required": round(dm_req, 2),
        "reward": p.preview_reward(),
    }


def _tool_prestige(holder: _GameHolder) -> dict[str, Any]:
    result = holder.runtime.perform_prestige()
    if not result.success:
        return {"success": False, "reason": result.reason}
    return {
        "success": True,
        "reward_amount": result.reward_amount,
        "new_level": result.new_level,
        "skipped_steps": list(result.skipped_steps),
    }


def _tool_simulate_offline(
    holder: _GameHolder, seconds: float, apply: bool = False
) -> dict[str, Any]:
    if seconds < 0:
        return {"error": "Seconds must not be negative"}
    rt = holder.runtime
    result = rt.apply_offline_earnings(seconds) if apply else rt.preview_offline(seconds)
    return {
        "applied": apply,
        "elapsed_seconds": result.elapsed_seconds,
        "money": round(result.money, 2),
        "dark_matter": round(result.dark_matter, 2),
    }


def _tool_wait(holder: _GameHolder, seconds: float) -> dict[str, Any]:
    if seconds <= 0:
        return {"error": "Seconds must be positive"}
    if seconds > _MAX_WAIT:
        return {"error": f"Cannot wait more than {_MAX_WAIT} seconds (24h) per call"}

    # Subdivide into 1-second ticks
    remaining = seconds
    while remaining > 0:
        dt = min(1.0, remaining)
        holder.runtime.tick(dt)
        remaining -= dt

    result: dict[str, Any] = {
        "waited": seconds,
        "time_elapsed": round(holder.runtime.time_elapsed, 2),
        "money": round(holder.runtime.money(), 2),
        "dark_matter": round(holder.runtime.dark_matter(), 2),
    }
    result.update(holder.drain())
    return result


def _tool_check_rollover(holder: _GameHolder, now: str = "") -> dict[str, Any]:
    if now:
        try:
            when = datetime.fromisoformat(now)
        except ValueError:
            return {"error": f"Unreadable timestamp: {now!r}"}
    else:
        when = datetime.now()
    result = holder.runtime.check_rollover(when)
    return {
        "daily": result.daily,
        "weekly": result.weekly,
        "daily_login": holder.runtime.check_daily_login(when),
    }


def _tool_activate_skill(holder: _GameHolder, skill: str = "") -> dict[str, Any]:
    rt = holder.runtime
    if skill:
        try:
            kind = ActiveSkillKind[skill.upper()]
        except KeyError:
            return {"error": f"Unknown active skill: {skill!r}"}
    else:
        kind = rt.active_skills.best_available()
        if kind is None:
            return {"success": False, "reason": "No active skill ready"}
    result = rt.activate_skill(kind)
    if not result.success:
        return {"success": False, "reason": result.reason}
    out: dict[str, Any] = {
        "success": True,
        "skill": kind.name,
        "cooldown": round(result.cooldown, 2),
        "money": round(rt.money(), 2),
    }
    out.update(holder.drain())
    return out


def _tool_claim_daily_reward(holder: _GameHolder) -> dict[str, Any]:
    result = holder.runtime.claim_daily_reward()
    if not result.success:
        return {"success": False, "reason": result.reason}
    reward = result.reward
    return {
        "success": True,
        "streak_day": result.streak_day,
        "reward": {
            "type": reward.type.name,
            "amount": round(reward.amount, 2),
            "duration": reward.duration,
        },
    }


def _tool_save_game(holder: _GameHolder, path: str = "") -> dict[str, Any]:
    target = path or holder.save_path
    if not target:
        return {"error": "No save path given"}
    save_file(holder.runtime.snapshot(now=time.time()), target)
    return {"success": True, "path": target}


def _tool_new_game(holder: _GameHolder) -> dict[str, Any]:
    holder.reset()
    return {"success": True, "message": "Economy reset to initial state"}


# ── Server factory ──────────────────────────────────────────────────


def create_server(
    definition: EconomyDefinition, save_path: str | None = None
) -> FastMCP:
    """Create an MCP server wrapping an EconomyRuntime for the given definition.

    With *save_path*, an existing save is loaded and resumed at startup
    and ``save_game`` writes back to it by default.
    """
    runtime = EconomyRuntime(definition)
    if save_path:
        runtime.restore(load_file(save_path))
        runtime.resume(time.time())
    holder = _GameHolder(
        definition=definition,
        runtime=runtime,
        save_path=save_path,
    )

    mcp = FastMCP(
        name=f"idlecore: {definition.config.name}",
    )

    @mcp.tool()
    def get_economy_info() -> dict[str, Any]:
        """Get static overview: unit tiers, skills, milestones, ascension cost."""
        return _tool_get_economy_info(holder)

    @mcp.tool()
    def get_state() -> dict[str, Any]:
        """Get current state: balances, units, helpers, skills and every stat."""
        return _tool_get_state(holder)

    @mcp.tool()
    def get_goals() -> dict[str, Any]:
        """Get milestone and active mission progress."""
        return _tool_get_goals(holder)

    @mcp.tool()
    def roll(count: int = 1) -> dict[str, Any]:
        """Roll a random owned unit N times (max 1000)."""
        return _tool_roll(holder, count)

    @mcp.tool()
    def buy_unit(tier: str) -> dict[str, Any]:
        """Buy a unit of the given tier (BASIC, BRONZE, ...)."""
        return _tool_buy_unit(holder, tier)

    @mcp.tool()
    def unlock_dark_matter() -> dict[str, Any]:
        """Pay the one-time ascension cost to start earning dark matter."""
        return _tool_unlock_dark_matter(holder)

    @mcp.tool()
    def buy_skill(skill_id: str) -> dict[str, Any]:
        """Unlock a skill node with dark matter."""
        return _tool_buy_skill(holder, skill_id)

    @mcp.tool()
    def buy_helper() -> dict[str, Any]:
        """Buy one helper hand, if under the cap."""
        return _tool_buy_helper(holder)

    @mcp.tool()
    def claim_goal(goal_id: str) -> dict[str, Any]:
        """Claim the rewards of a completed goal."""
        return _tool_claim_goal(holder, goal_id)

    @mcp.tool()
    def overclock(unit_id: str) -> dict[str, Any]:
        """Overclock a unit: higher payout until it overheats and is destroyed."""
        return _tool_overclock(holder, unit_id)

    @mcp.tool()
    def preview_prestige() -> dict[str, Any]:
        """Show prestige requirements and the reward a prestige would give now."""
        return _tool_preview_prestige(holder)

    @mcp.tool()
    def prestige() -> dict[str, Any]:
        """Perform a prestige reset if the requirements are met."""
        return _tool_prestige(holder)

    @mcp.tool()
    def simulate_offline(seconds: float, apply: bool = False) -> dict[str, Any]:
        """Compute (and optionally credit) offline earnings for the given seconds."""
        return _tool_simulate_offline(holder, seconds, apply)

    @mcp.tool()
    def wait(seconds: float) -> dict[str, Any]:
        """Advance game time by the given seconds (max 86400). Time is subdivided into 1s ticks."""
        return _tool_wait(holder, seconds)

    @mcp.tool()
    def check_rollover(now: str = "") -> dict[str, Any]:
        """Refresh missions and check in for the daily reward (ISO timestamp, default now)."""
        return _tool_check_rollover(holder, now)

    @mcp.tool()
    def activate_skill(skill: str = "") -> dict[str, Any]:
        """Trigger ROLL_BURST or HYPERBURST (default: the best one ready)."""
        return _tool_activate_skill(holder, skill)

    @mcp.tool()
    def claim_daily_reward() -> dict[str, Any]:
        """Claim today's daily login reward (check in via check_rollover first)."""
        return _tool_claim_daily_reward(holder)

    @mcp.tool()
    def save_game(path: str = "") -> dict[str, Any]:
        """Write the current state to a JSON save file (default: the startup save)."""
        return _tool_save_game(holder, path)

    @mcp.tool()
    def new_game() -> dict[str, Any]:
        """Reset the economy to initial state."""
        return _tool_new_game(holder)

    return mcp
