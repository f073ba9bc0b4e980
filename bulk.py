"""Bulk moderation over a set of post ids.

Both operations validate that every requested id exists before issuing a
single set-based mutation. The check and the mutation are separate
statements, so a post removed in between only lowers the affected count.
Callers should trust the returned count over the requested ids.
"""
import logging
from datetime import datetime
from typing import List, NamedTuple

from sqlalchemy.orm import Session

import models
from database import store_guard
from errors import InvalidArgument, NotFound
from moderation import ensure_admin, parse_status

logger = logging.getLogger("blog.bulk")


class BulkResult(NamedTuple):
    affected: int
    post_ids: List[int]


def validate_ids(post_ids) -> List[int]:
    if not post_ids:
        raise InvalidArgument("Post IDs array is required and cannot be empty.")
    ids = list(post_ids)
    if len(set(ids)) != len(ids):
        raise InvalidArgument("Post IDs must be distinct.")
    return ids


def ensure_all_exist(db: Session, ids: List[int]):
    with store_guard(db, "checking posts"):
        found = db.query(models.Post.id).filter(models.Post.id.in_(ids)).all()
    if len(found) < len(ids):
        missing = sorted(set(ids) - {row.id for row in found})
        logger.warning("Bulk action rejected, missing posts %s", missing)
        raise NotFound("One or more posts not found")


def bulk_set_status(db: Session, actor_role, post_ids, target_status) -> BulkResult:
    """Set the status of every listed post, or none if any id is unknown"""
    ensure_admin(actor_role)
    ids = validate_ids(post_ids)
    status = parse_status(target_status)
    ensure_all_exist(db, ids)

    with store_guard(db, "bulk updating posts"):
        affected = (db.query(models.Post)
                    .filter(models.Post.id.in_(ids))
                    .update({models.Post.status: status,
                             models.Post.updated_at: datetime.now()},
                            synchronize_session=False))
        db.commit()

    logger.info("Bulk set %s on %d of %d post(s)", status.value, affected, len(ids))
    return BulkResult(affected, ids)


def bulk_delete(db: Session, actor_role, post_ids) -> BulkResult:
    """Delete every listed post, or none if any id is unknown"""
    ensure_admin(actor_role)
    ids = validate_ids(post_ids)
    ensure_all_exist(db, ids)

    with store_guard(db, "bulk deleting posts"):
        affected = (db.query(models.Post)
                    .filter(models.Post.id.in_(ids))
                    .delete(synchronize_session=False))
        db.commit()

    logger.info("Bulk deleted %d of %d post(s)", affected, len(ids))
    return BulkResult(affected, ids)
