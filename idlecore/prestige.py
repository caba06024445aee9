from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field

from idlecore.aggregator import ModifierAggregator
from idlecore.currency import CurrencyKind, CurrencyStore
from idlecore.events import EventBus, PrestigeCompleted
from idlecore.helpers import HelperPool
from idlecore.modifier import ModifierMode, Stat, StatModifier
from idlecore.overclock import OverclockStateMachine
from idlecore.scaling import Scaling
from idlecore.skills import SkillRegistry
from idlecore.units import UnitRegistry

logger = logging.getLogger(__name__)

PRESTIGE_SOURCE = "prestige"


@dataclass
class PrestigeConfig:
    """Thresholds, reward formula and per-level bonuses of the prestige reset."""

    money_requirement: float = 100000.0
    money_requirement_scaling: Scaling = field(
        default_factory=lambda: Scaling.exponential(3.0)
    )
    dark_matter_requirement: float = 500.0
    dark_matter_requirement_scaling: Scaling = field(
        default_factory=lambda: Scaling.linear(0.5)
    )
    reward_currency: CurrencyKind = CurrencyKind.TIME_SHARDS
    base_reward: float = 10.0
    reward_per_level: float = 5.0
    dark_matter_conversion: float = 0.1
    lifetime_money_factor: float = 0.0001
    money_multiplier_per_level: float = 0.1
    dark_matter_multiplier_per_level: float = 0.05
    unit_value_per_level: float = 1.0
    starting_money_per_level: float = 100.0
    skill_cost_reduction_per_level: float = 0.02
    max_skill_cost_reduction: float = 0.5


@dataclass(frozen=True)
class PrestigeBonuses:
    """Permanent bonuses granted by a prestige level."""

    money_multiplier: float = 1.0
    dark_matter_multiplier: float = 1.0
    unit_value_bonus: float = 0.0
    starting_money: float = 0.0
    skill_cost_reduction: float = 0.0

    @classmethod
    def for_level(cls, level: int, config: PrestigeConfig) -> PrestigeBonuses:
        return cls(
            money_multiplier=1.0 + config.money_multiplier_per_level * level,
            dark_matter_multiplier=1.0 + config.dark_matter_multiplier_per_level * level,
            unit_value_bonus=config.unit_value_per_level * level,
            starting_money=config.starting_money_per_level * level,
            skill_cost_reduction=min(
                config.skill_cost_reduction_per_level * level,
                config.max_skill_cost_reduction,
            ),
        )

    def modifiers(self) -> list[StatModifier]:
        """The single prestige-tagged modifier set for these bonuses."""
        mult = ModifierMode.MULTIPLICATIVE
        add = ModifierMode.ADDITIVE
        return [
            StatModifier(PRESTIGE_SOURCE, Stat.GLOBAL_MONEY_MULTIPLIER, mult, self.money_multiplier),
            StatModifier(PRESTIGE_SOURCE, Stat.DARK_MATTER_MULTIPLIER, mult, self.dark_matter_multiplier),
            StatModifier(PRESTIGE_SOURCE, Stat.UNIT_VALUE_BONUS, add, self.unit_value_bonus),
            StatModifier(PRESTIGE_SOURCE, Stat.SKILL_COST_REDUCTION, add, self.skill_cost_reduction),
        ]


@dataclass
class PrestigeState:
    """Survives every reset; only ever grows."""

    level: int = 0
    total_prestiges: int = 0
    lifetime_reward: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> PrestigeState:
        return cls(
            level=max(0, int(data.get("level", 0))),
            total_prestiges=max(0, int(data.get("total_prestiges", 0))),
            lifetime_reward=max(0.0, float(data.get("lifetime_reward", 0.0))),
        )


@dataclass(frozen=True)
class PrestigeResult:
    """Outcome of a prestige attempt."""

    success: bool
    reward_amount: float = 0.0
    new_level: int = 0
    skipped_steps: tuple[str, ...] = ()
    reason: str = ""


class PrestigeOrchestrator:
    """Trades current progress for a permanent bonus and meta-currency.

    The only component that mutates several collaborators in one
    operation. ``skills``, ``helpers`` and ``overclock`` are optional;
    when one is missing its reset step is skipped and reported.
    """

    def __init__(
        self,
        currencies: CurrencyStore,
        units: UnitRegistry,
        aggregator: ModifierAggregator,
        bus: EventBus,
        skills: SkillRegistry | None = None,
        helpers: HelperPool | None = None,
        overclock: OverclockStateMachine | None = None,
        config: PrestigeConfig | None = None,
    ) -> None:
        self.currencies = currencies
        self.units = units
        self.aggregator = aggregator
        self.bus = bus
        self.skills = skills
        self.helpers = helpers
        self.overclock = overclock
        self.config = config or PrestigeConfig()
        self.state = PrestigeState()

    @property
    def level(self) -> int:
        return self.state.level

    def requirements(self) -> tuple[float, float]:
        """(money, dark matter) needed to prestige at the current level."""
        cfg = self.config
        level = self.state.level
        return (
            cfg.money_requirement_scaling.compute(cfg.money_requirement, level),
            cfg.dark_matter_requirement_scaling.compute(cfg.dark_matter_requirement, level),
        )

    def can_prestige(self) -> bool:
        money_req, dm_req = self.requirements()
        return (
            self.currencies.get_amount(CurrencyKind.MONEY) >= money_req
            and self.currencies.get_amount(CurrencyKind.DARK_MATTER) >= dm_req
        )

    def preview_reward(self) -> float:
        cfg = self.config
        return float(math.floor(
            cfg.base_reward
            + self.state.level * cfg.reward_per_level
            + self.currencies.get_amount(CurrencyKind.DARK_MATTER) * cfg.dark_matter_conversion
            + self.currencies.get_lifetime(CurrencyKind.MONEY) * cfg.lifetime_money_factor
        ))

    def bonuses(self, level: int | None = None) -> PrestigeBonuses:
        return PrestigeBonuses.for_level(
            self.state.level if level is None else level, self.config
        )

    def apply_bonuses(self) -> None:
        """Replace the prestige modifier set with the one for the current level."""
        self.aggregator.replace_source(PRESTIGE_SOURCE, self.bonuses().modifiers())

    def perform_prestige(self) -> PrestigeResult:
        if not self.can_prestige():
            money_req, dm_req = self.requirements()
            return PrestigeResult(
                False,
                new_level=self.state.level,
                reason=f"Requires {money_req:g} money and {dm_req:g} dark matter",
            )

        # Reward uses pre-reset totals and the pre-increment level
        reward = self.preview_reward()
        self.currencies.add(self.config.reward_currency, reward, reason="prestige")

        self.state.level += 1
        self.state.total_prestiges += 1
        self.state.lifetime_reward += reward
        bonuses = self.bonuses()
        skipped: list[str] = []

        self.currencies.zero(CurrencyKind.MONEY)
        self.currencies.zero(CurrencyKind.DARK_MATTER)
        self.currencies.add(
            CurrencyKind.MONEY, bonuses.starting_money,
            count_lifetime=False, reason="reset",
        )

        if self.overclock is not None:
            self.overclock.reset()
        self.units.reset_to_baseline()

        if self.skills is None:
            logger.warning("No skill registry; skill effects were not reset")
            skipped.append("skills")
        else:
            for skill_id in self.skills.list_unlocked():
                self.aggregator.remove_all_from_source(skill_id)
            self.skills.clear()

        if self.helpers is None:
            logger.warning("No helper pool; helpers were not reset")
            skipped.append("helpers")
        else:
            self.helpers.reset()

        self.apply_bonuses()

        logger.info("Prestige to level %d, reward %g", self.state.level, reward)
        self.bus.publish(PrestigeCompleted(self.state.level, reward))
        return PrestigeResult(
            True,
            reward_amount=reward,
            new_level=self.state.level,
            skipped_steps=tuple(skipped),
        )

    # ── Persistence ──────────────────────────────────────────────────

    def snapshot(self) -> dict:
        return self.state.to_dict()

    def restore(self, data: dict) -> None:
        try:
            self.state = PrestigeState.from_dict(data or {})
        except (TypeError, ValueError, AttributeError):
            logger.warning("Discarding unreadable prestige state %r", data)
            self.state = PrestigeState()
        self.apply_bonuses()
