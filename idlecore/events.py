"""Domain events and the synchronous bus that carries them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from idlecore._types import Listener

if TYPE_CHECKING:
    from idlecore.active_skills import ActiveSkillKind
    from idlecore.currency import CurrencyKind
    from idlecore.goal import GoalKind, GoalScope, RewardType
    from idlecore.units import UnitTier


@dataclass(frozen=True)
class CurrencyChanged:
    kind: CurrencyKind
    amount: float
    lifetime: float
    delta: float
    reason: str = ""


@dataclass(frozen=True)
class UnitAdded:
    unit_id: str
    tier: UnitTier
    purchased: bool = False
    owned_count: int = 0


@dataclass(frozen=True)
class UnitRemoved:
    unit_id: str
    tier: UnitTier


@dataclass(frozen=True)
class UnitProduced:
    unit_id: str
    amount: float
    is_bonus: bool = False
    dark_matter: float = 0.0
    manual: bool = True


@dataclass(frozen=True)
class SkillUnlocked:
    skill_id: str


@dataclass(frozen=True)
class SkillRevoked:
    skill_id: str


@dataclass(frozen=True)
class SkillTreeReset:
    skill_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class GoalCompleted:
    goal_id: str
    kind: GoalKind


@dataclass(frozen=True)
class GoalClaimed:
    goal_id: str
    kind: GoalKind


@dataclass(frozen=True)
class MissionsRefreshed:
    scope: GoalScope
    goal_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class UnitOverclocked:
    unit_id: str


@dataclass(frozen=True)
class OverclockHeatChanged:
    unit_id: str
    heat: float
    warning: bool = False


@dataclass(frozen=True)
class UnitDestroyed:
    unit_id: str
    tier: UnitTier
    reward: float


@dataclass(frozen=True)
class PrestigeCompleted:
    level: int
    reward: float


@dataclass(frozen=True)
class OfflineEarningsApplied:
    money: float
    dark_matter: float
    elapsed_seconds: float


@dataclass(frozen=True)
class DarkMatterUnlocked:
    pass


@dataclass(frozen=True)
class ActiveSkillActivated:
    kind: ActiveSkillKind
    cooldown: float


@dataclass(frozen=True)
class DailyRewardAvailable:
    streak_day: int


@dataclass(frozen=True)
class DailyRewardClaimed:
    streak_day: int
    reward_type: RewardType
    amount: float


class EventBus:
    """Synchronous publish/subscribe keyed by event class.

    Handlers run in subscription order on the publishing call stack.
    Publishing from inside a handler is allowed; handlers must not
    re-publish the event class they are currently handling.
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Listener]] = {}
        self._published: int = 0

    def subscribe(self, event_type: type, handler: Listener) -> Callable[[], None]:
        """Register *handler* for *event_type*. Returns an unsubscribe callable."""
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return _unsubscribe

    def publish(self, event: object) -> None:
        self._published += 1
        # Copy so handlers can unsubscribe during dispatch
        for handler in list(self._handlers.get(type(event), ())):
            handler(event)

    def handler_count(self, event_type: type) -> int:
        return len(self._handlers.get(event_type, ()))

    @property
    def published_count(self) -> int:
        return self._published


@dataclass
class EventRecorder:
    """Collects published events of the given types, for hosts and tests."""

    bus: EventBus
    types: tuple[type, ...]
    events: list = field(default_factory=list)

    def __post_init__(self) -> None:
        self._unsubscribers = [
            self.bus.subscribe(t, self.events.append) for t in self.types
        ]

    def of_type(self, event_type: type) -> list:
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        self.events.clear()

    def close(self) -> None:
        for unsub in self._unsubscribers:
            unsub()
        self._unsubscribers = []
