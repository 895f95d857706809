import logging
from typing import AsyncGenerator

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from blog_comments.config.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# MySQL(asyncmy)을 기본으로 사용하지만 URL만 바꾸면 다른 async 드라이버로도 동작합니다.
# SQLite는 StaticPool/NullPool을 쓰므로 pool_timeout을 받지 않습니다.
_engine_options: dict = {
    "echo": settings.database.echo,
    "pool_pre_ping": settings.database.pool_pre_ping,
}
if make_url(settings.database.url).get_backend_name() != "sqlite":
    _engine_options["pool_timeout"] = settings.database.pool_timeout

_engine = create_async_engine(settings.database.url, **_engine_options)

_async_session = async_sessionmaker(
    bind=_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class SchemaMismatchError(RuntimeError):
    pass


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    `session: AsyncSession = Depends(get_session)`로 사용
    """
    async with _async_session() as session:
        yield session


def _validate_schema(sync_conn) -> list[str]:
    """
    모델 메타데이터와 실제 DB 스키마를 비교하여 불일치 항목을 반환합니다.
    존재하지 않는 테이블은 create_all에서 생성되므로 건너뜁니다.
    """
    errors = []
    inspector = sa_inspect(sync_conn)
    existing_tables = inspector.get_table_names()

    for table_name, table in Base.metadata.tables.items():
        if table_name not in existing_tables:
            continue

        db_columns = {col["name"] for col in inspector.get_columns(table_name)}
        model_columns = {col.name for col in table.columns}

        for col_name in sorted(model_columns - db_columns):
            errors.append(f"[{table_name}] column '{col_name}' is missing in DB")
        for col_name in sorted(db_columns - model_columns):
            errors.append(f"[{table_name}] column '{col_name}' is not mapped")

    return errors


async def startup() -> None:
    """서버 시작 시 스키마 검증 후 없는 테이블만 생성합니다."""
    async with _engine.begin() as conn:
        errors = await conn.run_sync(_validate_schema)
        if errors:
            for error in errors:
                logger.error("  - %s", error)
            raise SchemaMismatchError("DB schema does not match the comment model")

        await conn.run_sync(Base.metadata.create_all)
    logger.info("DB 테이블 초기화 완료")


async def shutdown() -> None:
    """서버 종료 시 연결 풀을 반환합니다."""
    await _engine.dispose()
