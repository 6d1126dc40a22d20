from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Identity:
    """Authenticated caller as supplied by the identity layer.

    Trusted as-is; credentials are verified elsewhere.
    """

    subject_id: str
    display_name: str
    role: Role = Role.EMPLOYEE
    department: Optional[str] = None
    employee_code: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def summary(self) -> dict:
        return {
            "display_name": self.display_name,
            "subject_id": self.subject_id,
            "employee_code": self.employee_code,
            "department": self.department,
        }
