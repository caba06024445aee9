from __future__ import annotations

from dataclasses import dataclass, field

from idlecore.active_skills import ActiveSkillConfig
from idlecore.daily_login import DailyLoginConfig
from idlecore.goal import GoalDefinition, GoalKind, GoalScope
from idlecore.offline import OfflineConfig
from idlecore.overclock import OverclockConfig
from idlecore.prestige import PrestigeConfig
from idlecore.scaling import Scaling
from idlecore.skills import SkillNodeDef
from idlecore.units import UnitDef, UnitTier


@dataclass
class EconomyConfig:
    """Top-level economy configuration."""

    name: str = "Untitled"
    starting_money: float = 0.0
    baseline_tier: UnitTier = UnitTier.BASIC
    ascension_cost: float = 1000.0
    daily_mission_count: int = 3
    weekly_mission_count: int = 5
    helper_base_cost: float = 1000.0
    helper_cost_scaling: Scaling = field(default_factory=lambda: Scaling.exponential(1.25))


@dataclass
class EconomyDefinition:
    """Complete static definition of a dice economy."""

    config: EconomyConfig = field(default_factory=EconomyConfig)
    units: list[UnitDef] = field(default_factory=list)
    skills: list[SkillNodeDef] = field(default_factory=list)
    milestones: list[GoalDefinition] = field(default_factory=list)
    daily_missions: list[GoalDefinition] = field(default_factory=list)
    weekly_missions: list[GoalDefinition] = field(default_factory=list)
    prestige: PrestigeConfig = field(default_factory=PrestigeConfig)
    overclock: OverclockConfig = field(default_factory=OverclockConfig)
    offline: OfflineConfig = field(default_factory=OfflineConfig)
    daily_login: DailyLoginConfig = field(default_factory=DailyLoginConfig)
    active_skills: ActiveSkillConfig = field(default_factory=ActiveSkillConfig)

    # Lookup dicts built in __post_init__
    _units_by_tier: dict[UnitTier, UnitDef] = field(
        default_factory=dict, init=False, repr=False
    )
    _skills_by_id: dict[str, SkillNodeDef] = field(
        default_factory=dict, init=False, repr=False
    )
    _goals_by_id: dict[str, GoalDefinition] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._units_by_tier = {u.tier: u for u in self.units}
        self._skills_by_id = {s.id: s for s in self.skills}
        self._goals_by_id = {
            g.id: g
            for g in [*self.milestones, *self.daily_missions, *self.weekly_missions]
        }

    def get_unit(self, tier: UnitTier) -> UnitDef | None:
        return self._units_by_tier.get(tier)

    def get_skill(self, id: str) -> SkillNodeDef | None:
        return self._skills_by_id.get(id)

    def get_goal(self, id: str) -> GoalDefinition | None:
        return self._goals_by_id.get(id)

    def validate(self) -> list[str]:
        """Check for common definition errors. Returns list of error messages."""
        errors: list[str] = []

        seen_t: set[UnitTier] = set()
        for u in self.units:
            if u.tier in seen_t:
                errors.append(f"Duplicate unit tier: {u.tier.name}")
            seen_t.add(u.tier)
        if self.config.baseline_tier not in seen_t:
            errors.append(
                f"Baseline tier {self.config.baseline_tier.name} has no unit definition"
            )

        seen_s: set[str] = set()
        for s in self.skills:
            if s.id in seen_s:
                errors.append(f"Duplicate skill ID: {s.id!r}")
            seen_s.add(s.id)
        for s in self.skills:
            for pre in s.prerequisites:
                if pre not in seen_s:
                    errors.append(f"Skill {s.id!r} requires unknown skill {pre!r}")
            if s.cost < 0:
                errors.append(f"Skill {s.id!r} has negative cost")

        # Goal ids are shared across milestones and both mission pools
        seen_g: set[str] = set()
        for g in [*self.milestones, *self.daily_missions, *self.weekly_missions]:
            if g.id in seen_g:
                errors.append(f"Duplicate goal ID: {g.id!r}")
            seen_g.add(g.id)
            if g.target <= 0:
                errors.append(f"Goal {g.id!r} must have a positive target")

        for g in self.milestones:
            if g.kind is not GoalKind.MILESTONE or g.scope is not GoalScope.PERMANENT:
                errors.append(f"Milestone {g.id!r} must be a permanent MILESTONE goal")
        for pool, scope in (
            (self.daily_missions, GoalScope.DAILY),
            (self.weekly_missions, GoalScope.WEEKLY),
        ):
            for g in pool:
                if g.kind is not GoalKind.MISSION or g.scope is not scope:
                    errors.append(
                        f"Mission {g.id!r} must be a {scope.name} MISSION goal"
                    )

        if self.config.daily_mission_count < 0 or self.config.weekly_mission_count < 0:
            errors.append("Mission counts must not be negative")
        if self.offline.base_cycle_seconds <= 0:
            errors.append("Offline base cycle must be positive")
        if self.overclock.heat_per_roll <= 0:
            errors.append("Overclock heat per roll must be positive")
        if self.active_skills.hyperburst_duration <= 0:
            errors.append("Hyperburst duration must be positive")
        errors.extend(self.daily_login.validate())

        return errors
