"""
Chip read session state machine.

The chip transport reports progress through :class:`SessionEvent` values; :class:`ReadSession`
turns them into a linear lifecycle::

    READY -> CONNECTING -> AUTHENTICATING -> READING_PERSONAL_DATA <-> READING_PHOTO
                                                                    -> COMPLETED | FAILED

``FAILED`` is reachable from every non-terminal state. Terminal states are left only through an
explicit :meth:`ReadSession.reset`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, Union

from mrtd_reader.exceptions import (
    InvalidSessionTransitionError,
    TransportError,
    TransportErrorKind,
)
from mrtd_reader.models.passport import DataGroupSet, DataGroupTag

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    READY = "ready"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    READING_PERSONAL_DATA = "reading_personal_data"
    READING_PHOTO = "reading_photo"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in {SessionState.COMPLETED, SessionState.FAILED}


@dataclass(frozen=True)
class PassportPresented:
    """A chip entered the field."""


@dataclass(frozen=True)
class AuthenticationProgress:
    step: str = ""


@dataclass(frozen=True)
class DataGroupProgress:
    tag: DataGroupTag
    percent: int = 0


@dataclass(frozen=True)
class ReadSucceeded:
    """The transport finished reading every data group it intended to read."""


@dataclass(frozen=True)
class ReadFailed:
    kind: TransportErrorKind = TransportErrorKind.UNKNOWN
    detail: str | None = None


SessionEvent = Union[
    PassportPresented, AuthenticationProgress, DataGroupProgress, ReadSucceeded, ReadFailed
]


@dataclass(frozen=True)
class ChipReadResult:
    """Everything a chip transport returns after a successful session."""

    data_groups: DataGroupSet
    bac_success: bool = True
    personal_fields: Mapping[str, str] = field(default_factory=dict)
    photo: bytes | None = None
    additional_info: Mapping[str, str] = field(default_factory=dict)
    reading_errors: tuple[str, ...] = ()


class ChipTransport(Protocol):
    """Contactless transport that performs BAC with an access key and reads data groups."""

    async def read_passport(
        self, access_key: str, on_event: Callable[[SessionEvent], None]
    ) -> ChipReadResult:
        """Run a full chip session, reporting progress through ``on_event``.

        Raises:
            TransportError: If the session fails
        """


COMPLETE_PERCENT = 100


class ReadSession:
    """Thread-safe lifecycle of a single chip read."""

    def __init__(self, required_data_groups: Iterable[DataGroupTag] = (DataGroupTag.DG1,)) -> None:
        self.required_data_groups = frozenset(required_data_groups)
        self._lock = threading.Lock()
        self._state = SessionState.READY
        self._data_groups_read: set[DataGroupTag] = set()
        self._error: TransportError | None = None
        self._history: list[SessionState] = [SessionState.READY]
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def error(self) -> TransportError | None:
        with self._lock:
            return self._error

    @property
    def data_groups_read(self) -> frozenset[DataGroupTag]:
        with self._lock:
            return frozenset(self._data_groups_read)

    @property
    def history(self) -> tuple[SessionState, ...]:
        with self._lock:
            return tuple(self._history)

    def begin(self) -> None:
        """Start connecting; only allowed from READY (a user action)."""
        with self._lock:
            if self._state is not SessionState.READY:
                raise InvalidSessionTransitionError(self._state.value, "begin")
            self._transition_to(SessionState.CONNECTING)

    def reset(self) -> None:
        """User-initiated return to READY from any state."""
        with self._lock:
            self._data_groups_read.clear()
            self._error = None
            self._transition_to(SessionState.READY)

    def fail(self, error: TransportError) -> None:
        self.handle(ReadFailed(kind=error.kind, detail=error.detail))

    def handle(self, event: SessionEvent) -> SessionState:
        """
        Apply a transport event.

        Events arriving after the session reached a terminal state are ignored.

        Raises:
            InvalidSessionTransitionError: If the session has not been started
        """
        with self._lock:
            if self._state.is_terminal:
                self._logger.debug("Ignoring %s in terminal state %s", event, self._state.value)
                return self._state
            if self._state is SessionState.READY:
                raise InvalidSessionTransitionError(self._state.value, type(event).__name__)

            if isinstance(event, ReadFailed):
                self._error = TransportError(event.kind, event.detail)
                self._transition_to(SessionState.FAILED)
            elif isinstance(event, (PassportPresented, AuthenticationProgress)):
                if self._state is SessionState.CONNECTING:
                    self._transition_to(SessionState.AUTHENTICATING)
            elif isinstance(event, DataGroupProgress):
                if event.percent >= COMPLETE_PERCENT:
                    self._data_groups_read.add(event.tag)
                    self._logger.debug(
                        "Finished reading %s", event.tag.value, extra={"data_group": event.tag.value}
                    )
                target = (
                    SessionState.READING_PHOTO
                    if event.tag is DataGroupTag.DG2
                    else SessionState.READING_PERSONAL_DATA
                )
                if self._state is SessionState.CONNECTING:
                    self._transition_to(SessionState.AUTHENTICATING)
                self._transition_to(target)
            elif isinstance(event, ReadSucceeded):
                missing = self.required_data_groups - self._data_groups_read
                if missing:
                    names = ", ".join(sorted(tag.value for tag in missing))
                    self._error = TransportError(
                        TransportErrorKind.MALFORMED_RESPONSE, f"missing {names}"
                    )
                    self._transition_to(SessionState.FAILED)
                else:
                    self._transition_to(SessionState.COMPLETED)
            return self._state

    def _transition_to(self, new_state: SessionState) -> None:
        if self._state is new_state:
            return
        old_state = self._state
        self._state = new_state
        self._history.append(new_state)
        self._logger.info(
            "Read session transitioned from %s to %s",
            old_state.value,
            new_state.value,
            extra={"session_state": new_state.value},
        )
