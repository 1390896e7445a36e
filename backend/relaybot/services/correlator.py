from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from relaybot.models.message_mapping import MessageMapping

log = logging.getLogger("relaybot.correlator")


class CorrelationNotFound(Exception):
    pass


class DuplicateCorrelationKey(Exception):
    pass


@dataclass(frozen=True)
class Correlation:
    source_user_id: int
    source_message_id: int


def record(db: Session, *, relay_message_id: int, source_user_id: int, source_message_id: int) -> MessageMapping:
    row = MessageMapping(
        relay_message_id=relay_message_id,
        source_user_id=source_user_id,
        source_message_id=source_message_id,
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateCorrelationKey(f"relay_message_id={relay_message_id} is already mapped") from e
    return row


def resolve(db: Session, relay_message_id: int) -> Correlation:
    row = db.execute(
        select(MessageMapping.source_user_id, MessageMapping.source_message_id)
        .where(MessageMapping.relay_message_id == relay_message_id)
    ).one_or_none()
    if row is None:
        raise CorrelationNotFound(relay_message_id)
    return Correlation(source_user_id=row.source_user_id, source_message_id=row.source_message_id)


def prune(db: Session, *, older_than: datetime) -> int:
    res = db.execute(
        delete(MessageMapping)
        .where(MessageMapping.created_at < older_than)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    log.info("pruned %s message mappings created before %s", res.rowcount, older_than.isoformat())
    return res.rowcount
