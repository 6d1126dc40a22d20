from __future__ import annotations

from typing import Protocol


class EmployeeDirectory(Protocol):
    """Read-only view of the identity store used by the stats overview."""

    def count_active_employees(self) -> int:
        raise NotImplementedError
