"""Main application module."""
import logging
from typing import Annotated, List

from fastapi import Depends, FastAPI, Form, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import config
import models
from analytics import compute_analytics
from auth import (Actor, StaticPrincipal, authenticate, get_current_actor, get_current_admin,
                  get_static_principals, hash_password, set_jwt_cookie)
from bulk import bulk_delete, bulk_set_status
from database import engine, get_db
from errors import BlogError, InvalidArgument, Unauthorized
from logging_config import configure_logging
from moderation import delete_post, edit_post, set_status
import posts
from schemas import (AdminPostOut, BulkDelete, BulkStatusUpdate, PostCreate, PostOut,
                     PostUpdate, PostWithAuthor, RegisterRequest, StatusUpdate)
from users import create_user, validate_registration

configure_logging()
logger = logging.getLogger("blog.api")

app = FastAPI(title="Blog moderation service")
models.Base.metadata.create_all(bind=engine)

db_dependency = Annotated[Session, Depends(get_db)]
actor_dependency = Annotated[Actor, Depends(get_current_actor)]
admin_dependency = Annotated[Actor, Depends(get_current_admin)]


@app.exception_handler(BlogError)
async def blog_error_handler(request: Request, exc: BlogError):
    """Render core errors as {"error": kind, "detail": message}"""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code,
                        content={"error": exc.kind, "detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed request input as InvalidArgument"""
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{field}: {error.get('msg')}" if field else error.get("msg"))
    return await blog_error_handler(request, InvalidArgument("; ".join(problems) or "Invalid request"))


def register(payload: RegisterRequest, db: Session, role: models.RoleEnum):
    validate_registration(payload.name, payload.email, payload.password)
    return create_user(db,
                       name=payload.name,
                       email=payload.email,
                       password_hash=hash_password(payload.password),
                       role=role)


@app.post("/auth/register", status_code=status.HTTP_201_CREATED)
async def register_user(payload: RegisterRequest, db: db_dependency):
    """Create a regular user account"""
    user = register(payload, db, models.RoleEnum.USER)
    return {"message": "User created successfully", "user_id": user.id}


@app.post("/auth/register-admin", status_code=status.HTTP_201_CREATED)
async def register_admin(payload: RegisterRequest,
                         db: db_dependency,
                         current_admin: admin_dependency):
    """Create an admin account. Only accessible by admin users"""
    user = register(payload, db, models.RoleEnum.ADMIN)
    logger.info("Admin %s created admin account %s", current_admin.email, user.email)
    return {"message": "Admin user created successfully", "user_id": user.id, "role": user.role.value}


@app.post("/login")
async def login(response: Response,
                db: db_dependency,
                email: str = Form(...),
                password: str = Form(...),
                principals: List[StaticPrincipal] = Depends(get_static_principals)):
    """Authenticate with email and password"""
    actor = authenticate(db, email, password, principals)
    if actor is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = set_jwt_cookie(response, actor)
    return {
        "message": f"Welcome {'Admin' if actor.is_admin else 'User'} {actor.name}",
        "access_token": token,
        "token_type": "bearer",
    }


@app.post("/logout")
async def logout(response: Response):
    """Log out the current user by deleting the JWT access token cookie"""
    response.delete_cookie("access_token")
    return {"message": "Logged out successfully"}


@app.get("/me", response_model=Actor)
async def get_me(current_actor: actor_dependency):
    """Retrieve information about the currently authenticated actor"""
    return current_actor


@app.get("/posts", response_model=List[PostWithAuthor])
async def get_published_posts(db: db_dependency):
    """Public listing of approved posts"""
    return posts.list_published_posts(db)


@app.get("/posts/{post_id}", response_model=PostWithAuthor)
async def read_published_post(post_id: int, db: db_dependency):
    """Public view of one approved post"""
    return posts.get_published_post(db, post_id)


@app.post("/posts", status_code=status.HTTP_201_CREATED, response_model=PostOut)
async def create_post(payload: PostCreate, db: db_dependency, current_actor: actor_dependency):
    """Create a post for the current user; it starts out PENDING"""
    return posts.create_post(db, current_actor, payload.title, payload.content)


@app.get("/me/posts", response_model=List[PostOut])
async def get_my_posts(db: db_dependency, current_actor: actor_dependency):
    """Every post of the current user, whatever its status"""
    if current_actor.id is None:
        return []
    return posts.list_author_posts(db, current_actor.id)


@app.get("/me/posts/{post_id}", response_model=PostOut)
async def get_my_post(post_id: int, db: db_dependency, current_actor: actor_dependency):
    return posts.get_author_post(db, current_actor.id, post_id)


@app.put("/posts/{post_id}")
async def update_post(post_id: int,
                      payload: PostUpdate,
                      db: db_dependency,
                      current_actor: actor_dependency):
    """Edit an owned post; the edit sends it back for review"""
    post = edit_post(db, current_actor.id, post_id, payload.title, payload.content)
    return {"message": "Post updated successfully", "post": PostOut.model_validate(post)}


@app.delete("/posts/{post_id}")
async def remove_post(post_id: int, db: db_dependency, current_actor: actor_dependency):
    """Delete a post. Only the owner or an admin can delete it"""
    delete_post(db, current_actor, post_id)
    return {"message": "Post deleted successfully"}


@app.get("/admin/posts", response_model=List[AdminPostOut])
async def admin_list_posts(db: db_dependency, current_admin: admin_dependency):
    """All posts with their authors, newest first"""
    return posts.list_all_posts(db)


@app.patch("/admin/posts/bulk")
async def admin_bulk_update(payload: BulkStatusUpdate,
                            db: db_dependency,
                            current_actor: actor_dependency):
    """Set one status on many posts at once"""
    result = bulk_set_status(db, current_actor.role, payload.post_ids, payload.status)
    return {
        "message": f"Successfully {payload.status.lower()} {result.affected} post(s)",
        "updated_count": result.affected,
        "post_ids": result.post_ids,
    }


@app.delete("/admin/posts/bulk")
async def admin_bulk_delete(payload: BulkDelete,
                            db: db_dependency,
                            current_actor: actor_dependency):
    """Delete many posts at once"""
    result = bulk_delete(db, current_actor.role, payload.post_ids)
    return {
        "message": f"Successfully deleted {result.affected} post(s)",
        "deleted_count": result.affected,
        "post_ids": result.post_ids,
    }


@app.get("/admin/posts/{post_id}", response_model=AdminPostOut)
async def admin_read_post(post_id: int, db: db_dependency, current_admin: admin_dependency):
    return posts.get_post_detail(db, post_id)


@app.patch("/admin/posts/{post_id}")
async def admin_update_status(post_id: int,
                              payload: StatusUpdate,
                              db: db_dependency,
                              current_actor: actor_dependency):
    """Approve, reject or requeue a single post"""
    post = set_status(db, current_actor.role, post_id, payload.status)
    return {
        "message": f"Post {post.status.value.lower()} successfully",
        "post": {
            "id": post.id,
            "title": post.title,
            "status": post.status.value,
            "author": {"name": post.author.name, "email": post.author.email},
            "updated_at": post.updated_at.isoformat(),
        },
    }


@app.delete("/admin/posts/{post_id}")
async def admin_delete_post(post_id: int, db: db_dependency, current_actor: actor_dependency):
    """Delete any post as an admin"""
    if not current_actor.is_admin:
        raise Unauthorized("Unauthorized. Admin access required.")
    delete_post(db, current_actor, post_id)
    return {"message": "Post deleted successfully"}


@app.get("/admin/analytics")
async def admin_analytics(db: db_dependency,
                          current_admin: admin_dependency,
                          days: str | None = None):
    """Post and user statistics over a trailing window of days"""
    return compute_analytics(db, days)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, log_level=config.LOG_LEVEL.lower())
