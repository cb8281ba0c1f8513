"""
Commit-then-publish: domain events bound to a database transaction.

Workflow services never publish directly. They queue events on the session
with ``publish_after_commit``; the events reach the bus only once the
outermost transaction commits, and are dropped if it rolls back. A
notification can therefore never describe a transition that did not persist.
"""

from typing import Any, List, Protocol, Tuple, Union

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, SessionTransaction

from catalog.kernel.events.event_types import DomainEvent
from catalog.logging_config import get_logger

logger = get_logger(__name__)

_PENDING_KEY = "catalog.pending_events"


class EventPublisher(Protocol):
    def publish(self, event: DomainEvent) -> Any: ...


def publish_after_commit(
    session: Union[AsyncSession, Session],
    publisher: EventPublisher,
    domain_event: DomainEvent,
) -> None:
    """Queue ``domain_event`` to be published when ``session`` commits."""
    pending: List[Tuple[EventPublisher, DomainEvent]] = session.info.setdefault(_PENDING_KEY, [])
    pending.append((publisher, domain_event))


def pending_events(session: Union[AsyncSession, Session]) -> List[DomainEvent]:
    """Events queued on the session and not yet published."""
    return [evt for _, evt in session.info.get(_PENDING_KEY, [])]


@event.listens_for(Session, "after_commit")
def _publish_pending(session: Session) -> None:
    pending = session.info.pop(_PENDING_KEY, None)
    if not pending:
        return
    for publisher, domain_event in pending:
        publisher.publish(domain_event)
    logger.debug("Published %d event(s) after commit", len(pending))


@event.listens_for(Session, "after_transaction_end")
def _discard_pending(session: Session, transaction: SessionTransaction) -> None:
    # Savepoints end inside the outer transaction; only the root decides
    if transaction.parent is not None:
        return
    pending = session.info.pop(_PENDING_KEY, None)
    if pending:
        logger.info(
            "Discarded %d event(s) from a transaction that did not commit",
            len(pending),
            extra={"event_kinds": [evt.kind for _, evt in pending]},
        )
