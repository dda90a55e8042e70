"""Configuration management using pydantic-settings."""
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Content API (consumed by the client)
    api_base_url: str = "http://127.0.0.1:8787/api"
    request_timeout: float = 30.0

    # Client-side cache settings
    cache_enabled: bool = True
    cache_prefix: str = "blog_cache_"
    cache_ttl_seconds: int = 300
    cache_db_path: Path = Path("./cache/blog_cache.db")
    max_revalidation_workers: int = 4

    # Server settings
    database_url: str = "sqlite:///./blog.db"
    admin_password: str = "123456"
    seed_sample_posts: bool = True
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:4173",
        "http://localhost:5174",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
