import logging
import re
import secrets
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError

from blog_comments.config.config import CommentsConfig, settings
from blog_comments.dependencies.client import get_client_ip
from blog_comments.dependencies.rate_limit import RateLimiter, get_rate_limiter
from blog_comments.dependencies.store import CommentStore, get_store
from blog_comments.models.comment import Comment

logger = logging.getLogger(__name__)

_MARKUP_CHARS = re.compile(r"[<>]")
_NO_CACHE = "no-cache, no-store, must-revalidate"

router = APIRouter(
    prefix="/api/comments",
    tags=["Comments"],
)


class WriteCommentRequest(BaseModel):
    post_slug: str | None = None
    content: str | None = None
    # 예전 클라이언트는 `name`으로 보냄
    author: str | None = Field(
        default=None, validation_alias=AliasChoices("author", "name")
    )
    # honeypot: 사람은 채우지 않는 숨김 필드. 봇이 어떤 타입을 넣어도 받아야 함
    website: Any = None


class DeleteCommentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int | None = None
    admin_code: str | None = Field(default=None, alias="adminCode")

    @field_validator("id", mode="before")
    @classmethod
    def _blank_id_is_missing(cls, value):
        # `{"id": ""}`도 id 누락으로 처리
        if value == "":
            return None
        return value


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_slug: str
    content: str
    author: str
    created_at: datetime | None


class SuccessResponse(BaseModel):
    success: bool = True


def get_comments_config() -> CommentsConfig:
    return settings.comments


def sanitize_text(text: str | None, max_length: int) -> str:
    """
    꺾쇠 괄호를 제거하고 공백을 정리한 뒤 max_length로 자릅니다.
    자른 위치가 공백 뒤일 수 있으므로 끝 공백을 한 번 더 제거합니다.
    """
    if not text:
        return ""
    return _MARKUP_CHARS.sub("", text).strip()[:max_length].rstrip()


def _check_rate_limit(ip: str, limiter: RateLimiter) -> None:
    if limiter.check(ip):
        logger.info("rate limit: ip=%s", ip)
        raise HTTPException(
            status_code=429,
            detail=f"Too many requests. Please wait {limiter.window_seconds:g} seconds.",
        )


def _check_required(post_slug: str | None, content: str | None) -> None:
    if not post_slug or not content:
        raise HTTPException(status_code=400, detail="Missing required fields")


def _check_content_length(content: str, min_length: int) -> None:
    if len(content.strip()) < min_length:
        raise HTTPException(
            status_code=400,
            detail=f"Comment too short (minimum {min_length} characters)",
        )


def _check_admin_code(admin_code: str | None, config: CommentsConfig) -> None:
    """
    adminCode가 오면 반드시 일치해야 합니다.
    생략된 경우는 require_admin_code가 켜져 있을 때만 거부합니다.
    """
    if not admin_code:
        if config.require_admin_code:
            raise HTTPException(status_code=403, detail="Admin code required")
        return

    if not secrets.compare_digest(
        admin_code.encode("utf-8"), config.admin_code.encode("utf-8")
    ):
        raise HTTPException(status_code=403, detail="Invalid admin code")


@router.get("", response_model=list[CommentResponse])
async def list_comments(
    response: Response,
    slug: str | None = Query(default=None),
    store: CommentStore = Depends(get_store),
) -> list[Comment]:
    if not slug:
        raise HTTPException(status_code=400, detail="Missing slug")

    try:
        comments = await store.list_by_slug(slug)
    except SQLAlchemyError as e:
        logger.exception("comment 조회 실패: slug=%s", slug)
        raise HTTPException(status_code=500, detail="Failed to fetch comments") from e

    response.headers["Cache-Control"] = _NO_CACHE
    return comments


@router.post("", response_model=CommentResponse, status_code=201)
async def write_comment(
    body: WriteCommentRequest,
    ip: str = Depends(get_client_ip),
    limiter: RateLimiter = Depends(get_rate_limiter),
    store: CommentStore = Depends(get_store),
    config: CommentsConfig = Depends(get_comments_config),
) -> Comment | JSONResponse:
    if body.website:
        # 봇에게 탐지 사실을 알리지 않도록 성공처럼 응답
        logger.warning("spam attempt detected: ip=%s", ip)
        return JSONResponse(status_code=200, content={"success": True})

    _check_rate_limit(ip, limiter)
    _check_required(body.post_slug, body.content)
    _check_content_length(body.content, config.min_content_length)

    post_slug = sanitize_text(body.post_slug, config.max_slug_length)
    content = sanitize_text(body.content, config.max_content_length)
    author = (
        sanitize_text(body.author, config.max_author_length) or config.default_author
    )
    # 괄호 제거 후 다시 검사
    _check_required(post_slug, content)
    _check_content_length(content, config.min_content_length)

    try:
        return await store.insert(post_slug=post_slug, content=content, author=author)
    except SQLAlchemyError as e:
        logger.exception("comment 저장 실패: slug=%s ip=%s", post_slug, ip)
        raise HTTPException(status_code=500, detail="Failed to save comment") from e


@router.delete("", response_model=SuccessResponse)
async def delete_comment(
    body: DeleteCommentRequest,
    store: CommentStore = Depends(get_store),
    config: CommentsConfig = Depends(get_comments_config),
) -> SuccessResponse:
    if not body.id:
        raise HTTPException(status_code=400, detail="Missing comment ID")

    _check_admin_code(body.admin_code, config)

    try:
        await store.delete_by_id(body.id)
    except SQLAlchemyError as e:
        logger.exception("comment 삭제 실패: id=%s", body.id)
        raise HTTPException(status_code=500, detail="Failed to delete comment") from e

    return SuccessResponse()
