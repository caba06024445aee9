from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from idlecore.aggregator import ModifierAggregator
from idlecore.events import ActiveSkillActivated, EventBus
from idlecore.modifier import ModifierMode, Stat, StatModifier
from idlecore.skills import SkillRegistry

logger = logging.getLogger(__name__)

HYPERBURST_SOURCE = "active:hyperburst"


class ActiveSkillKind(Enum):
    # Values double as the feature keys skill nodes unlock
    ROLL_BURST = "roll_burst"
    HYPERBURST = "hyperburst"


@dataclass
class ActiveSkillConfig:
    """Cooldowns and strength of the player-triggered skills."""

    roll_burst_cooldown: float = 30.0
    hyperburst_cooldown: float = 45.0
    hyperburst_duration: float = 10.0
    hyperburst_multiplier: float = 2.0

    def base_cooldown(self, kind: ActiveSkillKind) -> float:
        if kind is ActiveSkillKind.HYPERBURST:
            return self.hyperburst_cooldown
        return self.roll_burst_cooldown


@dataclass(frozen=True)
class ActiveSkillResult:
    """Outcome of an activation attempt."""

    success: bool
    kind: ActiveSkillKind | None = None
    cooldown: float = 0.0
    reason: str = ""


class ActiveSkillManager:
    """Cooldown bookkeeping for Roll Burst and Hyperburst.

    A skill is ready as soon as it is unlocked. Activating it starts a
    cooldown of ``base * SKILL_COOLDOWN_MULTIPLIER`` seconds that counts
    down through :meth:`advance`. Roll Burst's effect (rolling every
    unit) belongs to whoever owns the units; Hyperburst is a timed
    multiplier on money and dark matter held by the aggregator.
    Cooldowns are session-local.
    """

    def __init__(
        self,
        aggregator: ModifierAggregator,
        bus: EventBus,
        skills: SkillRegistry,
        config: ActiveSkillConfig | None = None,
    ) -> None:
        self.aggregator = aggregator
        self.bus = bus
        self.skills = skills
        self.config = config or ActiveSkillConfig()
        self._cooldowns: dict[ActiveSkillKind, float] = {}

    # ── Queries ──────────────────────────────────────────────────────

    def is_unlocked(self, kind: ActiveSkillKind) -> bool:
        return kind.value in self.skills.unlocked_features()

    def effective_cooldown(self, kind: ActiveSkillKind) -> float:
        multiplier = self.aggregator.get_stat(Stat.SKILL_COOLDOWN_MULTIPLIER)
        return max(0.0, self.config.base_cooldown(kind) * multiplier)

    def remaining_cooldown(self, kind: ActiveSkillKind) -> float:
        return self._cooldowns.get(kind, 0.0)

    def is_ready(self, kind: ActiveSkillKind) -> bool:
        return self.is_unlocked(kind) and self.remaining_cooldown(kind) <= 0

    def hyperburst_remaining(self) -> float:
        return self.aggregator.timed_remaining(
            HYPERBURST_SOURCE, Stat.GLOBAL_MONEY_MULTIPLIER
        ) or 0.0

    def best_available(self) -> ActiveSkillKind | None:
        """Hyperburst when ready, otherwise Roll Burst, otherwise None."""
        for kind in (ActiveSkillKind.HYPERBURST, ActiveSkillKind.ROLL_BURST):
            if self.is_ready(kind):
                return kind
        return None

    # ── Actions ──────────────────────────────────────────────────────

    def activate(self, kind: ActiveSkillKind) -> ActiveSkillResult:
        if not self.is_unlocked(kind):
            return ActiveSkillResult(False, kind, reason=f"{kind.name} is locked")
        remaining = self.remaining_cooldown(kind)
        if remaining > 0:
            return ActiveSkillResult(
                False, kind, cooldown=remaining,
                reason=f"{kind.name} on cooldown for {remaining:.1f}s",
            )

        if kind is ActiveSkillKind.HYPERBURST:
            cfg = self.config
            for stat in (Stat.GLOBAL_MONEY_MULTIPLIER, Stat.DARK_MATTER_MULTIPLIER):
                self.aggregator.apply_timed(
                    StatModifier(
                        HYPERBURST_SOURCE, stat, ModifierMode.MULTIPLICATIVE,
                        cfg.hyperburst_multiplier,
                    ),
                    cfg.hyperburst_duration,
                )

        cooldown = self.effective_cooldown(kind)
        self._cooldowns[kind] = cooldown
        logger.info("%s activated, cooldown %.1fs", kind.name, cooldown)
        self.bus.publish(ActiveSkillActivated(kind, cooldown))
        return ActiveSkillResult(True, kind, cooldown=cooldown)

    def advance(self, delta: float) -> None:
        """Count every running cooldown down by *delta* seconds."""
        if delta <= 0:
            return
        for kind, remaining in list(self._cooldowns.items()):
            left = remaining - delta
            if left <= 0:
                del self._cooldowns[kind]
            else:
                self._cooldowns[kind] = left

    def reset(self) -> None:
        self._cooldowns.clear()
