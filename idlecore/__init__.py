# idlecore: dice economy progression core

from idlecore._types import Listener, clamp
from idlecore.scaling import Scaling
from idlecore.events import EventBus, EventRecorder
from idlecore.modifier import Modifier, ModifierMode, ModifierSpec, Stat, StatModifier
from idlecore.aggregator import ModifierAggregator, aggregate
from idlecore.currency import CurrencyKind, CurrencyState, CurrencyStore
from idlecore.units import ProductionUnit, UnitDef, UnitRegistry, UnitTier
from idlecore.skills import SkillNodeDef, SkillRegistry
from idlecore.helpers import HelperPool
from idlecore.goal import (
    ClaimResult,
    GoalDefinition,
    GoalKind,
    GoalMetric,
    GoalProgress,
    GoalScope,
    GoalStatus,
    Reward,
    RewardType,
    UpdateMode,
)
from idlecore.tracker import ProgressTracker, RolloverResult
from idlecore.feed import LifetimeStats, ProgressFeed
from idlecore.offline import (
    OfflineConfig,
    OfflineEarningsSimulator,
    OfflineResult,
    ProductionContext,
    UnitYield,
)
from idlecore.overclock import (
    OverclockConfig,
    OverclockResult,
    OverclockState,
    OverclockStateMachine,
    OverclockStatus,
)
from idlecore.prestige import (
    PrestigeBonuses,
    PrestigeConfig,
    PrestigeOrchestrator,
    PrestigeResult,
    PrestigeState,
)
from idlecore.active_skills import (
    ActiveSkillConfig,
    ActiveSkillKind,
    ActiveSkillManager,
    ActiveSkillResult,
)
from idlecore.daily_login import (
    DailyLoginConfig,
    DailyLoginResult,
    DailyLoginTracker,
    DailyRewardDay,
)
from idlecore.definition import EconomyConfig, EconomyDefinition
from idlecore.runtime import EconomyRuntime
from idlecore.formatting import format_number, format_status_report

__all__ = [
    # Types
    "Listener",
    "clamp",
    "Scaling",
    # Events
    "EventBus",
    "EventRecorder",
    # Modifiers
    "Modifier",
    "ModifierMode",
    "ModifierSpec",
    "Stat",
    "StatModifier",
    "ModifierAggregator",
    "aggregate",
    # Collaborators
    "CurrencyKind",
    "CurrencyState",
    "CurrencyStore",
    "ProductionUnit",
    "UnitDef",
    "UnitRegistry",
    "UnitTier",
    "SkillNodeDef",
    "SkillRegistry",
    "HelperPool",
    # Goals
    "ClaimResult",
    "GoalDefinition",
    "GoalKind",
    "GoalMetric",
    "GoalProgress",
    "GoalScope",
    "GoalStatus",
    "Reward",
    "RewardType",
    "UpdateMode",
    "ProgressTracker",
    "RolloverResult",
    "LifetimeStats",
    "ProgressFeed",
    # Offline
    "OfflineConfig",
    "OfflineEarningsSimulator",
    "OfflineResult",
    "ProductionContext",
    "UnitYield",
    # Overclock
    "OverclockConfig",
    "OverclockResult",
    "OverclockState",
    "OverclockStateMachine",
    "OverclockStatus",
    # Prestige
    "PrestigeBonuses",
    "PrestigeConfig",
    "PrestigeOrchestrator",
    "PrestigeResult",
    "PrestigeState",
    # Active skills
    "ActiveSkillConfig",
    "ActiveSkillKind",
    "ActiveSkillManager",
    "ActiveSkillResult",
    # Daily login
    "DailyLoginConfig",
    "DailyLoginResult",
    "DailyLoginTracker",
    "DailyRewardDay",
    # Definition
    "EconomyConfig",
    "EconomyDefinition",
    # Runtime
    "EconomyRuntime",
    # Formatting
    "format_number",
    "format_status_report",
]
