from __future__ import annotations

import logging
from dataclasses import dataclass

from idlecore.modifier import DEFAULT_BASES, ModifierMode, Stat, StatModifier

logger = logging.getLogger(__name__)


def aggregate(base: float, modifiers: list[StatModifier]) -> float:
    """Fold *modifiers* onto *base*: base * prod(mult) + sum(add).

    Modifiers are folded in source order so the same active set always
    produces the same bits, whatever order it was built in.
    """
    mult = 1.0
    flat = 0.0
    for mod in sorted(modifiers, key=lambda m: m.source_id):
        if mod.mode is ModifierMode.MULTIPLICATIVE:
            mult *= mod.magnitude
        elif mod.mode is ModifierMode.ADDITIVE:
            flat += mod.magnitude
    return base * mult + flat


@dataclass
class _TimedModifier:
    modifier: StatModifier
    remaining: float


class ModifierAggregator:
    """Holds the active modifier set and the aggregated value of every stat.

    Every mutation recomputes the touched stat from its full active set,
    so values never drift from a replay of the active modifiers.
    """

    def __init__(self, bases: dict[Stat, float] | None = None) -> None:
        self._bases: dict[Stat, float] = dict(DEFAULT_BASES)
        if bases:
            self._bases.update(bases)
        self._active: dict[Stat, dict[str, StatModifier]] = {s: {} for s in Stat}
        self._values: dict[Stat, float] = dict(self._bases)
        self._timed: dict[tuple[str, Stat], _TimedModifier] = {}

    # ── Mutations ────────────────────────────────────────────────────

    def apply_modifier(self, modifier: StatModifier) -> None:
        """Insert *modifier*, replacing any entry with the same source and stat."""
        self._active[modifier.stat][modifier.source_id] = modifier
        self._recompute(modifier.stat)
        logger.debug(
            "Applied %s %s=%s from %s",
            modifier.mode.name, modifier.stat.name, modifier.magnitude, modifier.source_id,
        )

    def remove_modifier(self, source_id: str, stat: Stat) -> bool:
        """Remove one modifier. Returns False if it was not active."""
        removed = self._active[stat].pop(source_id, None)
        self._timed.pop((source_id, stat), None)
        if removed is None:
            return False
        self._recompute(stat)
        return True

    def remove_all_from_source(self, source_id: str) -> int:
        """Remove every modifier tagged with *source_id*. Returns the count."""
        removed = 0
        for stat, mods in self._active.items():
            if source_id in mods:
                del mods[source_id]
                self._timed.pop((source_id, stat), None)
                self._recompute(stat)
                removed += 1
        return removed

    def replace_source(self, source_id: str, modifiers: list[StatModifier]) -> None:
        """Swap out every modifier of *source_id* for *modifiers*."""
        self.remove_all_from_source(source_id)
        for mod in modifiers:
            if mod.source_id != source_id:
                raise ValueError(
                    f"Modifier source {mod.source_id!r} does not match {source_id!r}"
                )
            self.apply_modifier(mod)

    def clear(self) -> None:
        self._active = {s: {} for s in Stat}
        self._timed.clear()
        self._values = dict(self._bases)

    # ── Timed modifiers ──────────────────────────────────────────────

    def apply_timed(self, modifier: StatModifier, seconds: float) -> None:
        """Apply *modifier* for *seconds* of runtime, then remove it."""
        if seconds <= 0:
            return
        self.apply_modifier(modifier)
        self._timed[modifier.key] = _TimedModifier(modifier, seconds)

    def advance(self, delta: float) -> list[StatModifier]:
        """Count down timed modifiers. Returns the ones that expired."""
        expired: list[StatModifier] = []
        for key, timed in list(self._timed.items()):
            timed.remaining -= delta
            if timed.remaining <= 0:
                expired.append(timed.modifier)
                del self._timed[key]
                self.remove_modifier(*key)
        return expired

    def timed_remaining(self, source_id: str, stat: Stat) -> float | None:
        timed = self._timed.get((source_id, stat))
        return timed.remaining if timed else None

    # ── Queries ──────────────────────────────────────────────────────

    def get_stat(self, stat: Stat) -> float:
        return self._values[stat]

    def base(self, stat: Stat) -> float:
        return self._bases[stat]

    def modifiers_for(self, stat: Stat) -> list[StatModifier]:
        return list(self._active[stat].values())

    def modifiers_from(self, source_id: str) -> list[StatModifier]:
        return [
            mods[source_id] for mods in self._active.values() if source_id in mods
        ]

    def active_modifiers(self) -> list[StatModifier]:
        return [m for mods in self._active.values() for m in mods.values()]

    def sources(self) -> set[str]:
        return {m.source_id for m in self.active_modifiers()}

    # ── Persistence ──────────────────────────────────────────────────

    def snapshot(self, exclude_timed: bool = True) -> list[list]:
        """Active modifiers as an ordered list of rows."""
        rows = []
        for mod in sorted(
            self.active_modifiers(), key=lambda m: (m.source_id, m.stat.name)
        ):
            if exclude_timed and mod.key in self._timed:
                continue
            rows.append(mod.to_row())
        return rows

    def restore(self, rows: list) -> None:
        """Replace the active set with *rows*, skipping malformed entries."""
        self.clear()
        for row in rows or []:
            try:
                mod = StatModifier.from_row(row)
            except (KeyError, ValueError, TypeError):
                logger.warning("Discarding unreadable modifier row %r", row)
                continue
            self._active[mod.stat][mod.source_id] = mod
        for stat in Stat:
            self._recompute(stat)

    # ── Private helpers ──────────────────────────────────────────────

    def _recompute(self, stat: Stat) -> None:
        self._values[stat] = aggregate(
            self._bases[stat], list(self._active[stat].values())
        )
