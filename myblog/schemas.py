"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel
from typing import Optional


# ===== POST SCHEMAS =====

class PostSummary(BaseModel):
    """Post listing row (no content)"""
    id: int
    title: str
    excerpt: Optional[str] = None
    category: Optional[str] = None
    readTime: Optional[str] = None
    date: str

    @classmethod
    def from_post(cls, post) -> "PostSummary":
        return cls(
            id=post.id,
            title=post.title,
            excerpt=post.excerpt,
            category=post.category,
            readTime=post.read_time,
            date=post.date,
        )


class PostDetail(PostSummary):
    """Full post with content"""
    content: str

    @classmethod
    def from_post(cls, post) -> "PostDetail":
        return cls(
            id=post.id,
            title=post.title,
            excerpt=post.excerpt,
            content=post.content,
            category=post.category,
            readTime=post.read_time,
            date=post.date,
        )


class PostIn(BaseModel):
    """Create/update body; title and content are checked by the handlers"""
    title: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    readTime: Optional[str] = None


# ===== RESPONSES =====

class PostCreated(BaseModel):
    id: int
    message: str


class Message(BaseModel):
    message: str


class StatusResponse(BaseModel):
    status: str
