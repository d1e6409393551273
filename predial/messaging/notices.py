# notices.py — Short user-visible messages (toasts)
#
# Workflows never raise to the caller for expected failures; they push a
# notice here and the API hands pending notices to the client.

from __future__ import annotations

import itertools
from dataclasses import asdict, dataclass

SUCCESS = "success"
ERROR = "error"
INFO = "info"


@dataclass(frozen=True)
class Notice:
    id: int
    message: str
    kind: str = INFO

    def to_dict(self) -> dict:
        return asdict(self)


class Notices:
    def __init__(self) -> None:
        self._pending: list[Notice] = []
        self._ids = itertools.count(1)

    def push(self, message: str, kind: str = INFO) -> Notice:
        notice = Notice(id=next(self._ids), message=message, kind=kind)
        self._pending.append(notice)
        return notice

    def success(self, message: str) -> Notice:
        return self.push(message, SUCCESS)

    def error(self, message: str) -> Notice:
        return self.push(message, ERROR)

    def info(self, message: str) -> Notice:
        return self.push(message, INFO)

    def drain(self) -> list[Notice]:
        """Return and clear everything pending."""
        notices, self._pending = self._pending, []
        return notices
