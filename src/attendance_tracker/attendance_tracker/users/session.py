from __future__ import annotations

from typing import Mapping, Optional

from ..core.enums import Role
from .model import Identity


def identity_from_session(data: Mapping) -> Optional[Identity]:
    """Build the caller identity from a Flask session (or any mapping).

    The login flow that fills the session lives outside this package.
    """
    user_id = data.get("user_id")
    if user_id in (None, ""):
        return None

    try:
        role = Role(data.get("role") or Role.EMPLOYEE.value)
    except ValueError:
        role = Role.EMPLOYEE

    return Identity(
        subject_id=str(user_id),
        display_name=str(data.get("name") or user_id),
        role=role,
        department=data.get("department"),
        employee_code=data.get("employee_code"),
    )
