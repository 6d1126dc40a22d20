from __future__ import annotations

import logging
from typing import Any, Callable, Hashable, Mapping, Optional, Protocol

from ..core.constants import ADMIN_GROUP, ATTENDANCE_UPDATE_EVENT, SUBJECT_GROUP_PREFIX
from ..core.enums import EventKind
from ..users.model import Identity
from .events import AttendanceEvent
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)

Dispatcher = Callable[..., Any]


class EventTransport(Protocol):
    """Delivers one event to one connection handle."""

    def send(self, connection: Hashable, event: str, payload: dict) -> None:
        raise NotImplementedError


def inline_dispatch(fn: Callable[..., Any], *args: Any) -> None:
    fn(*args)


def subject_group(subject_id: str) -> str:
    return f"{SUBJECT_GROUP_PREFIX}{subject_id}"


class RealtimeNotifier:
    """Publish/subscribe fan-out of attendance events to admin viewers.

    ``publish`` is fire-and-forget: delivery goes through ``dispatcher``
    (a background task under Socket.IO, inline in tests) and every failure is
    logged and swallowed, so the triggering check-in/out never sees it.
    """

    def __init__(
        self,
        transport: Optional[EventTransport] = None,
        *,
        registry: Optional[ConnectionRegistry] = None,
        dispatcher: Optional[Dispatcher] = None,
    ):
        self._transport = transport
        self._registry = registry or ConnectionRegistry()
        self._dispatch = dispatcher or inline_dispatch

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    def bind_transport(self, transport: EventTransport, *, dispatcher: Optional[Dispatcher] = None) -> None:
        self._transport = transport
        if dispatcher is not None:
            self._dispatch = dispatcher

    def join_admin_group(self, connection: Hashable, identity: Optional[Identity] = None) -> None:
        if self._registry.join(connection, ADMIN_GROUP):
            logger.info(
                "admin joined: connection=%s subject=%s",
                connection,
                identity.subject_id if identity else "-",
            )

    def leave_admin_group(self, connection: Hashable) -> None:
        if self._registry.leave(connection, ADMIN_GROUP):
            logger.info("admin left: connection=%s", connection)

    def join_subject_group(self, connection: Hashable, subject_id: str) -> None:
        if self._registry.join(connection, subject_group(subject_id)):
            logger.info("employee joined: connection=%s subject=%s", connection, subject_id)

    def disconnect(self, connection: Hashable) -> None:
        groups = self._registry.drop(connection)
        logger.debug("connection %s disconnected (groups=%s)", connection, sorted(groups))

    def admin_connections(self):
        return self._registry.members(ADMIN_GROUP)

    def publish(self, kind: EventKind, record: Mapping[str, Any], subject: Optional[Mapping[str, Any]] = None) -> int:
        """Queue ``kind`` for every admin connection; returns how many were targeted."""
        try:
            targets = self._registry.members(ADMIN_GROUP)
            if not targets or self._transport is None:
                return 0
            event = AttendanceEvent(kind=EventKind(kind), record=dict(record), subject=dict(subject or {}))
            self._dispatch(self._deliver, targets, event.to_payload())
            return len(targets)
        except Exception:
            logger.exception("publish of %s event failed", kind)
            return 0

    def _deliver(self, targets, payload: dict) -> None:
        for connection in targets:
            try:
                self._transport.send(connection, ATTENDANCE_UPDATE_EVENT, payload)
            except Exception as exc:
                logger.warning("delivery to %s failed: %s", connection, exc)
