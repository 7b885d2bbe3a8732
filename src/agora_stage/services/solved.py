# src/agora_stage/services/solved.py
"""Solved-state gate for question topics.

The solved flag is a two-state machine. A transition is computed against the
state read at the start of the request and then re-applied as a conditional
UPDATE, so the audit event is written only when the row actually changed at
commit time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from agora_stage.core.errors import (
    ForumError,
    InvalidTid,
    NoPrivileges,
    NoTopic,
    TopicNotQuestion,
)
from agora_stage.core.settings import settings
from agora_stage.db.time import utcnow
from agora_stage.models import Topic, TopicEvent
from agora_stage.models.topic import (
    TOPIC_EVENT_SOLVE,
    TOPIC_EVENT_UNSOLVE,
    TOPIC_KIND_QUESTION,
)
from agora_stage.services.roles import RoleFacts

logger = logging.getLogger(__name__)


class SolvedState(IntEnum):
    UNSOLVED = 0
    SOLVED = 1


_EVENT_TYPES = {
    SolvedState.SOLVED: TOPIC_EVENT_SOLVE,
    SolvedState.UNSOLVED: TOPIC_EVENT_UNSOLVE,
}


@dataclass(frozen=True)
class Transition:
    """Outcome of moving the solved flag towards a target state."""

    changed: bool
    state: SolvedState


def transition(current: SolvedState, target: SolvedState) -> Transition:
    """Return the transition from ``current`` to ``target``."""
    return Transition(changed=current is not target, state=target)


@dataclass
class SolveResult:
    """Result of one solve/unsolve call on a single topic."""

    tid: int
    state: SolvedState
    events: list[TopicEvent] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.events)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "tid": self.tid,
            "solved": int(self.state),
            "isSolved": self.state is SolvedState.SOLVED,
        }
        if self.events:
            payload["events"] = [serialize_event(event) for event in self.events]
        return payload


def serialize_event(event: TopicEvent) -> dict[str, Any]:
    return {
        "type": event.type,
        "uid": event.uid,
        "timestamp": event.timestamp.isoformat() if event.timestamp else None,
    }


def can_solve(topic: Topic, facts: RoleFacts) -> bool:
    """Return True when ``facts`` may toggle the solved flag of ``topic``."""
    if facts.is_self(topic.owner_uid):
        return True
    return settings.solve_allow_moderators and facts.is_admin_or_mod(topic.cid)


def _set_solved(db: Session, tid: int, facts: RoleFacts, target: SolvedState) -> SolveResult:
    topic = db.get(Topic, tid)
    if topic is None:
        raise NoTopic(tid=tid)
    if topic.kind != TOPIC_KIND_QUESTION:
        raise TopicNotQuestion(tid=tid)
    if not can_solve(topic, facts):
        logger.warning("uid %s denied %s on topic %s", facts.uid, _EVENT_TYPES[target], tid)
        raise NoPrivileges(tid=tid)

    step = transition(SolvedState(topic.solved), target)
    if step.changed:
        # Compare-and-set: a concurrent request may have got there first.
        outcome = db.execute(
            update(Topic)
            .where(Topic.tid == tid, Topic.solved != int(target))
            .values(solved=int(target))
        )
        step = Transition(changed=outcome.rowcount == 1, state=target)

    if not step.changed:
        logger.debug("Topic %s already %s; nothing to do", tid, target.name.lower())
        return SolveResult(tid=tid, state=step.state)

    event = TopicEvent(tid=tid, type=_EVENT_TYPES[target], uid=facts.uid, timestamp=utcnow())
    db.add(event)
    db.flush()
    logger.info("uid %s marked topic %s %s", facts.uid, tid, target.name.lower())
    return SolveResult(tid=tid, state=step.state, events=[event])


def solve(db: Session, tid: int, facts: RoleFacts) -> SolveResult:
    """Mark question topic ``tid`` as solved.

    Raises:
        NoTopic: If the topic does not exist.
        TopicNotQuestion: If the topic is not a question.
        NoPrivileges: If the actor is neither owner nor privileged.
    """
    result = _set_solved(db, tid, facts, SolvedState.SOLVED)
    db.commit()
    return result


def unsolve(db: Session, tid: int, facts: RoleFacts) -> SolveResult:
    """Mark question topic ``tid`` as unsolved. Mirrors :func:`solve`."""
    result = _set_solved(db, tid, facts, SolvedState.UNSOLVED)
    db.commit()
    return result


def _coerce_tids(tids: Any) -> list[int]:
    if not isinstance(tids, list):
        raise InvalidTid()
    parsed: list[int] = []
    for tid in tids:
        if isinstance(tid, bool):
            raise InvalidTid()
        if isinstance(tid, int):
            parsed.append(tid)
        elif isinstance(tid, str) and tid.isascii() and tid.isdigit():
            parsed.append(int(tid))
        else:
            raise InvalidTid()
    return parsed


def _set_solved_many(
    db: Session,
    tids: Any,
    facts: RoleFacts,
    target: SolvedState,
) -> list[SolveResult]:
    parsed = _coerce_tids(tids)
    savepoint = db.begin_nested()
    results: list[SolveResult] = []
    try:
        for tid in parsed:
            results.append(_set_solved(db, tid, facts, target))
    except ForumError as exc:
        savepoint.rollback()
        # Conditional UPDATEs patched loaded topics in place; reload them.
        db.expire_all()
        logger.warning("Batch %s aborted at topic %s: %s", _EVENT_TYPES[target], exc.tid, exc.kind)
        raise
    savepoint.commit()
    db.commit()
    return results


def solve_many(db: Session, tids: Any, facts: RoleFacts) -> list[SolveResult]:
    """Solve every topic in ``tids`` or none of them.

    Raises:
        InvalidTid: If ``tids`` is not a list of topic ids.
        ForumError: The first per-topic failure, carrying the failing ``tid``.
    """
    return _set_solved_many(db, tids, facts, SolvedState.SOLVED)


def unsolve_many(db: Session, tids: Any, facts: RoleFacts) -> list[SolveResult]:
    """Unsolve every topic in ``tids`` or none of them."""
    return _set_solved_many(db, tids, facts, SolvedState.UNSOLVED)


def list_events(db: Session, tid: int) -> list[TopicEvent]:
    """Return the solve/unsolve history of ``tid`` in the order it happened."""
    if db.get(Topic, tid) is None:
        raise NoTopic(tid=tid)
    return list(
        db.scalars(select(TopicEvent).where(TopicEvent.tid == tid).order_by(TopicEvent.id))
    )
