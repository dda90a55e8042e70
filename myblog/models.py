"""
Database models for the blog
SQLAlchemy ORM model for posts
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()

DEFAULT_CATEGORY = "随想"
DEFAULT_READ_TIME = "5 分钟"


class Post(Base):
    """
    Post entity - one article with free-form HTML or Markdown content
    """
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    excerpt = Column(String, nullable=True)
    content = Column(Text, nullable=False)
    category = Column(String, nullable=True, default=DEFAULT_CATEGORY, index=True)
    read_time = Column(String, nullable=True, default=DEFAULT_READ_TIME)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def date(self) -> str:
        """Calendar date the post was created (YYYY-MM-DD)."""
        return self.created_at.date().isoformat() if self.created_at else ""

    def __repr__(self):
        return f"<Post(id={self.id}, title='{self.title}', category='{self.category}')>"
