from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from ..core.enums import EventKind


@dataclass(frozen=True)
class AttendanceEvent:
    """Outbound payload pushed to admin viewers after every mutation."""

    kind: EventKind
    record: Dict[str, Any]
    subject: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict:
        return {
            "kind": self.kind.value,
            "record": dict(self.record),
            "subject": {
                "display_name": self.subject.get("display_name"),
                "subject_id": self.subject.get("subject_id"),
                "department": self.subject.get("department"),
            },
        }
