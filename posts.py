"""Post creation and the public, owner and admin listings."""
import logging

from sqlalchemy.orm import Session, joinedload

import models
from database import store_guard
from errors import InvalidArgument, NotFound, Unauthorized

logger = logging.getLogger("blog.posts")


def require_text(title: str, content: str):
    """Title and content must both be non-blank"""
    if not title or not title.strip() or not content or not content.strip():
        raise InvalidArgument("Title and content are required")


def get_post_by_id(db: Session, post_id: int):
    """Retrieve a post from the database by its ID"""
    with store_guard(db, "looking up post"):
        return db.query(models.Post).filter(models.Post.id == post_id).first()


def create_post(db: Session, actor, title: str, content: str):
    """Store a new post for the actor; new posts always await review"""
    require_text(title, content)
    if actor.id is None:
        raise Unauthorized("Only registered accounts can author posts")

    post = models.Post(title=title.strip(),
                       content=content,
                       status=models.StatusEnum.PENDING,
                       author_id=actor.id)
    with store_guard(db, "creating post"):
        db.add(post)
        db.commit()
        db.refresh(post)

    logger.info("User %s created post %s", actor.id, post.id)
    return post


def list_published_posts(db: Session):
    """Approved posts for the public listing, newest first"""
    with store_guard(db, "listing published posts"):
        return (db.query(models.Post)
                .options(joinedload(models.Post.author))
                .filter(models.Post.status == models.StatusEnum.APPROVED)
                .order_by(models.Post.created_at.desc(), models.Post.id.desc())
                .all())


def get_published_post(db: Session, post_id: int):
    with store_guard(db, "reading published post"):
        post = (db.query(models.Post)
                .options(joinedload(models.Post.author))
                .filter(models.Post.id == post_id,
                        models.Post.status == models.StatusEnum.APPROVED)
                .first())
    if not post:
        raise NotFound("Post not found")
    return post


def list_author_posts(db: Session, author_id: int):
    """Every post of one author, whatever its status"""
    with store_guard(db, "listing author posts"):
        return (db.query(models.Post)
                .filter(models.Post.author_id == author_id)
                .order_by(models.Post.created_at.desc(), models.Post.id.desc())
                .all())


def get_author_post(db: Session, author_id: int, post_id: int):
    """A single post of the given author; someone else's post reads as missing"""
    with store_guard(db, "reading author post"):
        post = (db.query(models.Post)
                .filter(models.Post.id == post_id,
                        models.Post.author_id == author_id)
                .first())
    if not post:
        raise NotFound("Post not found")
    return post


def list_all_posts(db: Session):
    """Every post with its author, for the moderation console"""
    with store_guard(db, "listing all posts"):
        return (db.query(models.Post)
                .options(joinedload(models.Post.author))
                .order_by(models.Post.created_at.desc(), models.Post.id.desc())
                .all())


def get_post_detail(db: Session, post_id: int):
    with store_guard(db, "reading post"):
        post = (db.query(models.Post)
                .options(joinedload(models.Post.author))
                .filter(models.Post.id == post_id)
                .first())
    if not post:
        raise NotFound("Post not found")
    return post
