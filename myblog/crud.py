"""
CRUD operations (Create, Read, Update, Delete)
Database query functions for posts
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from myblog.cache.policies import is_unfiltered
from myblog.models import Post, DEFAULT_CATEGORY, DEFAULT_READ_TIME


# ===== READS =====

def get_posts(db: Session, category: Optional[str] = None) -> List[Post]:
    """
    Get all posts, newest first
    - category: filter by category; empty or "全部" means no filter
    """
    query = db.query(Post).order_by(desc(Post.created_at), desc(Post.id))

    if not is_unfiltered(category):
        query = query.filter(Post.category == category)

    return query.all()


def get_post_by_id(db: Session, post_id: int) -> Optional[Post]:
    """
    Get a specific post by ID
    """
    return db.query(Post).filter(Post.id == post_id).first()


# ===== WRITES =====

def create_post(
    db: Session,
    title: str,
    content: str,
    excerpt: Optional[str] = None,
    category: Optional[str] = None,
    read_time: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Post:
    """
    Insert a post, filling in defaults for the optional fields
    """
    post = Post(
        title=title,
        excerpt=excerpt or "",
        content=content,
        category=category or DEFAULT_CATEGORY,
        read_time=read_time or DEFAULT_READ_TIME,
    )
    if created_at is not None:
        post.created_at = created_at
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def update_post(
    db: Session,
    post_id: int,
    title: str,
    content: str,
    excerpt: Optional[str] = None,
    category: Optional[str] = None,
    read_time: Optional[str] = None,
) -> Optional[Post]:
    """
    Overwrite every editable field of a post
    Returns None if the post does not exist
    """
    post = get_post_by_id(db, post_id)
    if post is None:
        return None

    post.title = title
    post.excerpt = excerpt
    post.content = content
    post.category = category
    post.read_time = read_time
    post.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(post)
    return post


def delete_post(db: Session, post_id: int) -> bool:
    """
    Delete a post
    Returns True if a row was removed
    """
    deleted = db.query(Post).filter(Post.id == post_id).delete()
    db.commit()
    return deleted > 0


# ===== SAMPLE DATA =====

SAMPLE_POSTS = [
    {
        "title": "The Craft of Modern Front-End Development",
        "excerpt": "From design systems to component architecture: building interfaces that feel effortless.",
        "content": (
            "<p>Front-end work has grown from page building into a craft of its own.</p>\n"
            "<h2>Design systems</h2>\n"
            "<p>Shared design tokens keep colour, type and spacing consistent across every screen.</p>\n"
            "<h2>Thinking in components</h2>\n"
            "<p>Small components with one job each are easier to test, reuse and reason about.</p>\n"
            "<h2>Performance</h2>\n"
            "<p>Code splitting, lazy loading and caching keep the first paint fast.</p>"
        ),
        "category": "前端开发",
        "read_time": "8 分钟",
        "created_at": datetime(2026, 1, 10),
    },
    {
        "title": "Notes on Minimal Design",
        "excerpt": "Less is more. On restraint, and why it makes work stronger.",
        "content": (
            "<p>Minimal is not the same as simple.</p>\n"
            "<h2>White space</h2>\n"
            "<p>Empty space is a deliberate choice that guides the eye.</p>\n"
            "<h2>Restraint</h2>\n"
            "<p>The hardest design decision is often deciding not to add something.</p>"
        ),
        "category": "设计思考",
        "read_time": "5 分钟",
        "created_at": datetime(2026, 1, 5),
    },
    {
        "title": "Poetry in Code",
        "excerpt": "Programming is logic, but it is also a creative act.",
        "content": (
            "<p>Good code has rhythm: indentation, blank lines and names all set the pace.</p>\n"
            "<h2>Abstraction</h2>\n"
            "<p>Every clean abstraction is an insight into the problem.</p>"
        ),
        "category": "随想",
        "read_time": "6 分钟",
        "created_at": datetime(2025, 12, 28),
    },
]


def seed_sample_posts(db: Session) -> int:
    """
    Insert the sample posts into an empty table
    Returns the number of posts inserted
    """
    if db.query(Post).count() > 0:
        return 0
    for sample in SAMPLE_POSTS:
        create_post(db, **sample)
    return len(SAMPLE_POSTS)
