from sqlalchemy import Column, DateTime, Integer, func


class BaseMixin:
    """
    모든 모델(테이블)의 공통 컬럼을 정의
    id와 created_at은 DB가 채웁니다.
    """

    id = Column(Integer, primary_key=True, autoincrement=True, nullable=False)
    created_at = Column(
        DateTime, server_default=func.now(), nullable=False, index=True
    )
