"""Data models for QStash publish requests."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class DispatchJob:
    """One unit of work handed to QStash. Not persisted here."""

    url: str
    body: dict = field(default_factory=dict)
    not_before: datetime | None = None

    @property
    def not_before_unix(self) -> int | None:
        if self.not_before is None:
            return None
        return int(self.not_before.timestamp())
