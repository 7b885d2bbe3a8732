"""Forum error taxonomy.

Every error carries a stable machine-readable ``kind`` token. Callers match on
the bracketed ``message`` (``[[error:<kind>]]``) rather than on display text.
"""

from __future__ import annotations

from fastapi import status


class ForumError(Exception):
    """Base class for rejected forum operations."""

    kind: str = "unknown"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, *, tid: int | None = None, pid: int | None = None) -> None:
        super().__init__(self.message)
        self.tid = tid
        self.pid = pid

    @property
    def message(self) -> str:
        """Return the wire token, e.g. ``[[error:no-topic]]``."""
        return f"[[error:{self.kind}]]"

    def to_payload(self) -> dict[str, object]:
        """Serialise the error for API responses."""
        payload: dict[str, object] = {"message": self.message}
        if self.tid is not None:
            payload["tid"] = self.tid
        if self.pid is not None:
            payload["pid"] = self.pid
        return payload


class NoTopic(ForumError):
    kind = "no-topic"
    status_code = status.HTTP_404_NOT_FOUND


class NoPost(ForumError):
    kind = "no-post"
    status_code = status.HTTP_404_NOT_FOUND


class NoCategory(ForumError):
    kind = "no-category"
    status_code = status.HTTP_404_NOT_FOUND


class NoPrivileges(ForumError):
    kind = "no-privileges"
    status_code = status.HTTP_403_FORBIDDEN


class TopicNotQuestion(ForumError):
    kind = "topic-not-question"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTid(ForumError):
    kind = "invalid-tid"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidData(ForumError):
    kind = "invalid-data"
    status_code = status.HTTP_400_BAD_REQUEST


class NotLoggedIn(ForumError):
    kind = "not-logged-in"
    status_code = status.HTTP_401_UNAUTHORIZED


__all__ = [
    "ForumError",
    "InvalidData",
    "InvalidTid",
    "NoCategory",
    "NoPost",
    "NoPrivileges",
    "NoTopic",
    "NotLoggedIn",
    "TopicNotQuestion",
]
