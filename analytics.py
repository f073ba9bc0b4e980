"""Read-only statistics over posts and users for the admin dashboard."""
import logging
import math
import re
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

import models
from database import store_guard

logger = logging.getLogger("blog.analytics")

DEFAULT_DAYS = 30
DAILY_POINTS = 7
MONTHLY_POINTS = 6
TOP_AUTHORS = 5
# a century back from now stays well inside the datetime range
MAX_DAYS = 36500

LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def normalize_days(raw) -> int:
    """Window size in days; anything unusable falls back to the default.

    Strings are read up to their first non-digit, so "7.5" and "7days" mean 7.
    """
    if isinstance(raw, str):
        match = LEADING_INT.match(raw)
        if not match:
            return DEFAULT_DAYS
        raw = match.group(1)
    try:
        days = int(raw)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_DAYS
    return days if 0 < days <= MAX_DAYS else DEFAULT_DAYS


def month_start(year: int, month: int) -> datetime:
    """First instant of a month, with month allowed to over- or underflow"""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return datetime(year, month, 1)


def round_half_up(value) -> int:
    return int(math.floor(float(value) + 0.5))


def count_posts(db: Session, *criteria) -> int:
    return db.query(func.count(models.Post.id)).filter(*criteria).scalar() or 0


def count_created_between(db: Session, start: datetime, end: datetime, *criteria) -> int:
    """Posts created in the half-open range [start, end)"""
    return count_posts(db,
                       models.Post.created_at >= start,
                       models.Post.created_at < end,
                       *criteria)


def daily_trend(db: Session, now: datetime):
    today = datetime(now.year, now.month, now.day)
    trend = []
    for offset in range(DAILY_POINTS - 1, -1, -1):
        day_start = today - timedelta(days=offset)
        trend.append({
            "date": day_start.strftime("%Y-%m-%d"),
            "posts": count_created_between(db, day_start, day_start + timedelta(days=1)),
        })
    return trend


def monthly_trend(db: Session, now: datetime):
    trend = []
    for offset in range(MONTHLY_POINTS - 1, -1, -1):
        start = month_start(now.year, now.month - offset)
        end = month_start(start.year, start.month + 1)
        trend.append({
            "month": start.strftime("%b %Y"),
            "posts": count_created_between(db, start, end),
        })
    return trend


def top_authors(db: Session):
    """Authors with at least one post, most prolific first"""
    post_count = func.count(models.Post.id).label("post_count")
    rows = (db.query(models.User.id, models.User.name, models.User.email, post_count)
            .join(models.Post, models.Post.author_id == models.User.id)
            .group_by(models.User.id, models.User.name, models.User.email)
            .order_by(post_count.desc(), models.User.id)
            .limit(TOP_AUTHORS)
            .all())
    return [
        {"id": row.id, "name": row.name, "email": row.email, "postCount": row.post_count}
        for row in rows
    ]


def average_content_length(db: Session) -> int:
    avg = db.query(func.avg(func.length(models.Post.content))).scalar()
    return round_half_up(avg) if avg is not None else 0


def compute_analytics(db: Session, days=DEFAULT_DAYS, now: datetime = None):
    """Summarize post and user counts as of now.

    The status overview is global. The "recent" block covers the trailing
    window of `days` days. The daily and monthly trends have a fixed length
    and ignore `days`.
    """
    days = normalize_days(days)
    now = now or datetime.now()
    window_start = now - timedelta(days=days)
    in_window = (models.Post.created_at >= window_start, models.Post.created_at <= now)
    status = models.Post.status

    with store_guard(db, "computing analytics"):
        overview = {
            "totalPosts": count_posts(db),
            "pendingPosts": count_posts(db, status == models.StatusEnum.PENDING),
            "approvedPosts": count_posts(db, status == models.StatusEnum.APPROVED),
            "rejectedPosts": count_posts(db, status == models.StatusEnum.REJECTED),
            "totalUsers": db.query(func.count(models.User.id)).scalar() or 0,
            "adminUsers": (db.query(func.count(models.User.id))
                           .filter(models.User.role == models.RoleEnum.ADMIN)
                           .scalar() or 0),
        }
        recent = {
            "posts": count_posts(db, *in_window),
            "pending": count_posts(db, *in_window, status == models.StatusEnum.PENDING),
            "approved": count_posts(db, *in_window, status == models.StatusEnum.APPROVED),
            "rejected": count_posts(db, *in_window, status == models.StatusEnum.REJECTED),
            "activity24h": count_posts(db, models.Post.created_at >= now - timedelta(days=1)),
        }
        trends = {"daily": daily_trend(db, now), "monthly": monthly_trend(db, now)}
        insights = {"topAuthors": top_authors(db), "avgContentLength": average_content_length(db)}

    logger.debug("Computed analytics over %d days", days)
    return {
        "overview": overview,
        "recent": recent,
        "trends": trends,
        "insights": insights,
        "period": f"{days} days",
    }
