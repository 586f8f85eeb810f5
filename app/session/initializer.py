from __future__ import annotations

import logging
import random
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed


logger = logging.getLogger(__name__)

DEFAULT_SESSION_CONFIG: Mapping[str, Any] = MappingProxyType(
    {
        "debugMode": False,
        "maxPlayers": 4,
        "startingPoints": 100,
    }
)

SESSION_ID_PREFIX = "game-"
SESSION_ID_UPPER_BOUND = 10_000


class LifecycleError(RuntimeError):
    """A session initializer was used out of order."""


class SessionPhase(StrEnum):
    unconfigured = "unconfigured"
    configured = "configured"
    initialized = "initialized"


class SessionLifecycle(StateMachine):
    """unconfigured -> configured -> initialized. There is no way back to unconfigured."""

    unconfigured = State(SessionPhase.unconfigured.value, value=SessionPhase.unconfigured.value, initial=True)
    configured = State(SessionPhase.configured.value, value=SessionPhase.configured.value)
    initialized = State(SessionPhase.initialized.value, value=SessionPhase.initialized.value)

    apply_config = unconfigured.to(configured) | configured.to.itself() | initialized.to(configured)
    mark_initialized = configured.to(initialized) | initialized.to.itself()

    @property
    def phase(self) -> SessionPhase:
        return SessionPhase(str(self.current_state.value))


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """A created session. `config` is a read-only snapshot taken at creation."""

    id: str
    config: Mapping[str, Any]
    created_at: datetime


def _now() -> datetime:
    return datetime.now(tz=UTC)


def merge_config(overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """Shallow overlay of `overrides` onto the defaults. Unknown keys are kept."""

    merged = dict(DEFAULT_SESSION_CONFIG)
    merged.update(overrides or {})
    return merged


class SessionInitializer:
    """Fluent builder: `SessionInitializer().configure({...}).initialize().create_session()`."""

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _now,
        rng: random.Random | None = None,
    ) -> None:
        self._lifecycle = SessionLifecycle()
        self._config: dict[str, Any] = {}
        self._clock = clock
        self._rng = rng or random.Random()

    @property
    def phase(self) -> SessionPhase:
        return self._lifecycle.phase

    @property
    def config(self) -> Mapping[str, Any]:
        return MappingProxyType(self._config)

    @property
    def is_initialized(self) -> bool:
        return self.phase == SessionPhase.initialized

    def configure(self, overrides: Mapping[str, Any] | None = None) -> "SessionInitializer":
        self._config = merge_config(overrides)
        self._lifecycle.apply_config()
        return self

    def initialize(self) -> "SessionInitializer":
        try:
            self._lifecycle.mark_initialized()
        except TransitionNotAllowed as e:
            raise LifecycleError("Must configure before initializing") from e
        logger.info("Initializing game with configuration: %s", self._config)
        return self

    def create_session(self) -> SessionRecord:
        if not self.is_initialized:
            raise LifecycleError("Must initialize before creating a session instance")

        session_id = f"{SESSION_ID_PREFIX}{self._rng.randrange(SESSION_ID_UPPER_BOUND)}"
        return SessionRecord(
            id=session_id,
            config=MappingProxyType(dict(self._config)),
            created_at=self._clock(),
        )
