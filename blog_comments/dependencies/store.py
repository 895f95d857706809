import logging

from fastapi import Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from blog_comments.dependencies.database import get_session
from blog_comments.models.comment import Comment

logger = logging.getLogger(__name__)


class CommentStore:
    """
    comment 테이블에 대한 insert / select / delete만 제공합니다.
    SQLAlchemyError는 그대로 전파되며, 호출하는 쪽에서 처리합니다.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def insert(self, post_slug: str, content: str, author: str) -> Comment:
        comment = Comment(post_slug=post_slug, content=content, author=author)
        self._session.add(comment)
        await self._session.commit()
        await self._session.refresh(comment)
        logger.info("comment 저장: id=%s slug=%s", comment.id, post_slug)
        return comment

    async def list_by_slug(self, post_slug: str) -> list[Comment]:
        result = await self._session.scalars(
            select(Comment)
            .where(Comment.post_slug == post_slug)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return list(result.all())

    async def delete_by_id(self, comment_id: int) -> int:
        """삭제된 row 수를 반환합니다. 없는 id여도 에러가 아닙니다."""
        result = await self._session.execute(
            delete(Comment).where(Comment.id == comment_id)
        )
        await self._session.commit()
        logger.info("comment 삭제: id=%s rows=%s", comment_id, result.rowcount)
        return result.rowcount


async def get_store(session: AsyncSession = Depends(get_session)) -> CommentStore:
    """
    `store: CommentStore = Depends(get_store)`로 사용
    """
    return CommentStore(session)
