"""
Blog content API - Main FastAPI Application
Five post endpoints plus password verification, backed by SQLite
"""
import logging
import secrets
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from myblog import crud
from myblog.db import get_db, init_db
from myblog.schemas import (
    Message, PostCreated, PostDetail, PostIn, PostSummary, StatusResponse,
)

logger = logging.getLogger("blog.server")

APP_VERSION = "v1.0.0"
APP_NAME = "MyBlog API"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title=APP_NAME,
    description="Posts for the blog front-end",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===== ERRORS =====

@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    """Every error body is {"error": message}."""
    message = exc.detail
    # Starlette's own 404 for an unmatched route
    if exc.status_code == 404 and message == "Not Found":
        message = "Endpoint not found"
    return JSONResponse(status_code=exc.status_code, content={"error": message})


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


# ===== AUTH =====

def require_admin(x_auth_key: Optional[str] = Header(default=None)) -> None:
    """Reject the request unless X-Auth-Key matches the admin password."""
    expected = settings.admin_password.encode("utf-8")
    supplied = (x_auth_key or "").encode("utf-8")
    if not secrets.compare_digest(supplied, expected):
        raise HTTPException(status_code=401, detail="Unauthorized: wrong password")


def _require_title_and_content(body: PostIn) -> None:
    if not body.title or not body.content:
        raise HTTPException(status_code=400, detail="Title and content are required")


# ===== SYSTEM =====

@app.get("/api/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.post("/api/verify", response_model=StatusResponse, dependencies=[Depends(require_admin)])
def verify_password():
    """Succeeds only when X-Auth-Key carries the admin password."""
    return {"status": "ok"}


# ===== POSTS =====

@app.get("/api/posts", response_model=List[PostSummary])
def list_posts(
    category: Optional[str] = Query(None, description="Category filter; 全部 means all"),
    db: Session = Depends(get_db),
):
    """Get post summaries, newest first."""
    try:
        posts = crud.get_posts(db, category=category)
    except SQLAlchemyError:
        logger.exception("Failed to list posts")
        raise HTTPException(status_code=500, detail="Failed to load posts")
    return [PostSummary.from_post(p) for p in posts]


@app.get("/api/posts/{post_id}", response_model=PostDetail)
def get_post(post_id: int, db: Session = Depends(get_db)):
    """Get one full post."""
    try:
        post = crud.get_post_by_id(db, post_id)
    except SQLAlchemyError:
        logger.exception(f"Failed to load post {post_id}")
        raise HTTPException(status_code=500, detail="Failed to load post")
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return PostDetail.from_post(post)


@app.post(
    "/api/posts",
    response_model=PostCreated,
    status_code=201,
    dependencies=[Depends(require_admin)],
)
def create_post(body: PostIn, db: Session = Depends(get_db)):
    """Create a post; excerpt, category and read time are optional."""
    _require_title_and_content(body)
    try:
        post = crud.create_post(
            db,
            title=body.title,
            content=body.content,
            excerpt=body.excerpt,
            category=body.category,
            read_time=body.readTime,
        )
    except SQLAlchemyError:
        logger.exception("Failed to create post")
        raise HTTPException(status_code=500, detail="Failed to create post")
    logger.info(f"Created post {post.id}")
    return {"id": post.id, "message": "Post created"}


@app.put("/api/posts/{post_id}", response_model=Message, dependencies=[Depends(require_admin)])
def update_post(post_id: int, body: PostIn, db: Session = Depends(get_db)):
    """Overwrite a post."""
    _require_title_and_content(body)
    try:
        post = crud.update_post(
            db,
            post_id,
            title=body.title,
            content=body.content,
            excerpt=body.excerpt,
            category=body.category,
            read_time=body.readTime,
        )
    except SQLAlchemyError:
        logger.exception(f"Failed to update post {post_id}")
        raise HTTPException(status_code=500, detail="Failed to update post")
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")
    return {"message": "Post updated"}


@app.delete("/api/posts/{post_id}", response_model=Message, dependencies=[Depends(require_admin)])
def delete_post(post_id: int, db: Session = Depends(get_db)):
    """Delete a post."""
    try:
        deleted = crud.delete_post(db, post_id)
    except SQLAlchemyError:
        logger.exception(f"Failed to delete post {post_id}")
        raise HTTPException(status_code=500, detail="Failed to delete post")
    if not deleted:
        raise HTTPException(status_code=404, detail="Post not found")
    return {"message": "Post deleted"}
