from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
from .exceptions import CapTableError

LEVELS = ("success", "info", "warning", "error")


@dataclass(frozen=True)
class Notice:
    level: str
    title: str
    description: str = ""

    @classmethod
    def from_error(cls, err: Exception, title: Optional[str] = None) -> "Notice":
        if isinstance(err, CapTableError):
            return cls("error", title or err.title, err.message)
        return cls("error", title or "Error", str(err) or "An unknown error occurred")
