from __future__ import annotations

import logging
from dataclasses import dataclass, field

from idlecore.currency import CurrencyKind, CurrencyStore
from idlecore.events import EventBus, SkillRevoked, SkillTreeReset, SkillUnlocked
from idlecore.modifier import ModifierSpec, StatModifier

logger = logging.getLogger(__name__)


@dataclass
class SkillNodeDef:
    """A node of the skill tree, bought with dark matter."""

    id: str
    display_name: str = ""
    description: str = ""
    cost: float = 1.0
    prerequisites: list[str] = field(default_factory=list)
    modifiers: list[ModifierSpec] = field(default_factory=list)
    branch: str = ""
    # Feature keys this node turns on, e.g. "roll_burst" or "daily_login"
    unlocks: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.id

    def bound_modifiers(self) -> list[StatModifier]:
        return [spec.bind(self.id) for spec in self.modifiers]


class SkillRegistry:
    """Tracks unlocked skill nodes. Effects are applied by whoever listens."""

    def __init__(
        self,
        definitions: list[SkillNodeDef],
        bus: EventBus,
        currencies: CurrencyStore | None = None,
    ) -> None:
        self.bus = bus
        self.currencies = currencies
        self._defs: dict[str, SkillNodeDef] = {d.id: d for d in definitions}
        self._unlocked: list[str] = []

    def get_def(self, skill_id: str) -> SkillNodeDef | None:
        return self._defs.get(skill_id)

    def definitions(self) -> list[SkillNodeDef]:
        return list(self._defs.values())

    def list_unlocked(self) -> list[str]:
        return list(self._unlocked)

    def is_unlocked(self, skill_id: str) -> bool:
        return skill_id in self._unlocked

    def unlocked_features(self) -> set[str]:
        return {f for sid in self._unlocked for f in self._defs[sid].unlocks}

    def feature_available(self, feature: str) -> bool:
        """A feature no node unlocks is always available."""
        if not any(feature in d.unlocks for d in self._defs.values()):
            return True
        return feature in self.unlocked_features()

    def prerequisites_met(self, skill_id: str) -> bool:
        sdef = self._defs.get(skill_id)
        if sdef is None:
            return False
        return all(p in self._unlocked for p in sdef.prerequisites)

    def current_cost(self, skill_id: str, cost_reduction: float = 0.0) -> float | None:
        sdef = self._defs.get(skill_id)
        if sdef is None:
            return None
        return sdef.cost * (1.0 - cost_reduction)

    def can_purchase(self, skill_id: str, cost_reduction: float = 0.0) -> bool:
        if self.is_unlocked(skill_id) or not self.prerequisites_met(skill_id):
            return False
        cost = self.current_cost(skill_id, cost_reduction)
        if cost is None or self.currencies is None:
            return False
        return self.currencies.can_afford(CurrencyKind.DARK_MATTER, cost)

    def purchase(self, skill_id: str, cost_reduction: float = 0.0) -> bool:
        """Spend dark matter and unlock. Returns True on success."""
        if not self.can_purchase(skill_id, cost_reduction):
            return False
        cost = self.current_cost(skill_id, cost_reduction)
        if not self.currencies.spend(CurrencyKind.DARK_MATTER, cost, reason="skill"):
            return False
        return self.unlock(skill_id)

    def unlock(self, skill_id: str) -> bool:
        """Unlock without paying. Returns False if unknown or already owned."""
        if skill_id not in self._defs or skill_id in self._unlocked:
            return False
        self._unlocked.append(skill_id)
        self.bus.publish(SkillUnlocked(skill_id))
        return True

    def revoke(self, skill_id: str, refund: bool = False) -> bool:
        if skill_id not in self._unlocked:
            return False
        self._unlocked.remove(skill_id)
        if refund and self.currencies is not None:
            self.currencies.add(
                CurrencyKind.DARK_MATTER,
                self._defs[skill_id].cost,
                count_lifetime=False,
                reason="refund",
            )
        self.bus.publish(SkillRevoked(skill_id))
        return True

    def clear(self) -> list[str]:
        """Forget every unlocked node without refunding. Returns what was cleared."""
        cleared = tuple(self._unlocked)
        self._unlocked.clear()
        self.bus.publish(SkillTreeReset(cleared))
        return list(cleared)

    # ── Persistence ──────────────────────────────────────────────────

    def snapshot(self) -> list[str]:
        return list(self._unlocked)

    def restore(self, skill_ids: list) -> None:
        """Set the unlocked list silently; modifiers are restored separately."""
        self._unlocked = []
        for sid in skill_ids or []:
            if sid not in self._defs:
                logger.warning("Discarding unknown skill id %r", sid)
                continue
            if sid not in self._unlocked:
                self._unlocked.append(sid)
