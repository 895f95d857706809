from sqlalchemy import Column, String, Text

from blog_comments.dependencies.database import Base
from blog_comments.models.mixin import BaseMixin


class Comment(Base, BaseMixin):
    __tablename__ = "comment"

    post_slug = Column(String(200), nullable=False, index=True, comment="글 slug")
    content = Column(Text, nullable=False, comment="댓글 내용")
    # 예전 데이터의 `name` 필드는 author로 통일
    author = Column(String(50), nullable=False, comment="작성자 표시 이름")
