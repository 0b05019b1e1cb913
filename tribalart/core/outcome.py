from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional
import logging

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    AUTH_REQUIRED = "auth_required"
    VALIDATION = "validation"
    REMOTE = "remote"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


@dataclass
class Outcome:
    """
    Result of a user action. Store and session operations return one of these
    instead of raising past their boundary.
    """
    ok: bool
    message: str = ""
    kind: Optional[ErrorKind] = None
    data: Any = None

    @classmethod
    def success(cls, message: str = "", data: Any = None) -> "Outcome":
        return cls(ok=True, message=message, data=data)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Outcome":
        return cls(ok=False, message=message, kind=kind)


@dataclass
class Notice:
    level: str
    message: str


@dataclass
class Notifier:
    """
    Collects user-facing notices (toast/alert equivalents) and logs them.
    """
    notices: List[Notice] = field(default_factory=list)

    def _push(self, level: str, message: str) -> None:
        self.notices.append(Notice(level=level, message=message))
        logger.info("[%s] %s", level, message)

    def success(self, message: str) -> None:
        self._push("success", message)

    def error(self, message: str) -> None:
        self._push("error", message)

    def info(self, message: str) -> None:
        self._push("info", message)

    def last(self) -> Optional[Notice]:
        return self.notices[-1] if self.notices else None

    def clear(self) -> None:
        self.notices = []
