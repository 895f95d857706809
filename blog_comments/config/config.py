from functools import lru_cache

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    url: str
    echo: bool = False
    pool_pre_ping: bool = True
    pool_timeout: int = 30


class CommentsConfig(BaseModel):
    admin_code: str
    require_admin_code: bool = False
    rate_limit_window: float = 30.0
    min_content_length: int = 3
    max_content_length: int = 1000
    max_author_length: int = 50
    max_slug_length: int = 200
    default_author: str = "Anonymous"


class Settings(BaseSettings):
    """
    기본 Configuration
    """

    database: DatabaseConfig
    comments: CommentsConfig

    model_config = SettingsConfigDict(
        env_file="blog_comments/config/.env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )


@lru_cache
def get_settings():
    return Settings()


settings: Settings = get_settings()
