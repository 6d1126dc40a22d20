from __future__ import annotations

import threading
from typing import FrozenSet, Hashable


class ConnectionRegistry:
    """Group name -> live connection handles, and the reverse index.

    Membership is process-local and starts empty; clients re-join after a
    reconnect. All operations are idempotent.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._members: dict[str, set[Hashable]] = {}
        self._groups_of: dict[Hashable, set[str]] = {}

    def join(self, connection: Hashable, group: str) -> bool:
        with self._lock:
            members = self._members.setdefault(group, set())
            if connection in members:
                return False
            members.add(connection)
            self._groups_of.setdefault(connection, set()).add(group)
            return True

    def leave(self, connection: Hashable, group: str) -> bool:
        with self._lock:
            members = self._members.get(group)
            if not members or connection not in members:
                return False
            members.discard(connection)
            if not members:
                del self._members[group]
            groups = self._groups_of.get(connection)
            if groups is not None:
                groups.discard(group)
                if not groups:
                    del self._groups_of[connection]
            return True

    def drop(self, connection: Hashable) -> FrozenSet[str]:
        """Forget a connection entirely; returns the groups it was in."""
        with self._lock:
            groups = self._groups_of.pop(connection, set())
            for group in groups:
                members = self._members.get(group)
                if members is not None:
                    members.discard(connection)
                    if not members:
                        del self._members[group]
            return frozenset(groups)

    def members(self, group: str) -> FrozenSet[Hashable]:
        with self._lock:
            return frozenset(self._members.get(group, ()))

    def groups_of(self, connection: Hashable) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._groups_of.get(connection, ()))
