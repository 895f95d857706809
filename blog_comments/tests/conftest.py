import os

# 설정은 import 시점에 읽히므로 앱 모듈보다 먼저 지정합니다.
# 테스트는 MySQL 대신 in-memory SQLite를 사용합니다.
os.environ["DATABASE__URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["COMMENTS__ADMIN_CODE"] = "test-admin-code"

from unittest.mock import AsyncMock  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import text  # noqa: E402
from sqlalchemy.exc import OperationalError  # noqa: E402

ADMIN_CODE = "test-admin-code"


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
async def init_db():
    """
    테스트마다 테이블을 만들고, 종료 후 데이터를 삭제합니다.
    lifespan 테스트가 엔진을 dispose하면 in-memory DB가 사라지므로 매번 create_all을 호출합니다.
    """
    import blog_comments.models.comment  # noqa: F401
    from blog_comments.dependencies.database import Base, _async_session, _engine

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with _async_session() as session:
        await session.execute(text("DELETE FROM comment"))
        await session.commit()


@pytest.fixture
async def db_session(init_db):
    """rate limit을 거치지 않고 DB를 직접 조작할 때 사용합니다."""
    from blog_comments.dependencies.database import _async_session

    async with _async_session() as session:
        yield session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock: FakeClock):
    from blog_comments.dependencies.rate_limit import RateLimiter

    return RateLimiter(window_seconds=30, clock=clock)


@pytest.fixture
def comments_config():
    from blog_comments.config.config import CommentsConfig

    return CommentsConfig(admin_code=ADMIN_CODE)


@pytest.fixture
async def api_client(init_db, rate_limiter, comments_config) -> httpx.AsyncClient:
    """
    in-memory SQLite와 연결된 테스트 클라이언트.
    rate limiter와 댓글 설정은 테스트마다 새 인스턴스로 교체합니다.
    """
    from blog_comments.dependencies.rate_limit import get_rate_limiter
    from blog_comments.main import app
    from blog_comments.routers.comment import get_comments_config

    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_comments_config] = lambda: comments_config
    try:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def mock_store(api_client):
    """
    insert 호출 여부를 검사하기 위한 store. 실제 DB에는 닿지 않습니다.
    override는 api_client 종료 시 함께 제거됩니다.
    """
    from blog_comments.dependencies.store import CommentStore, get_store
    from blog_comments.main import app

    store = AsyncMock(spec=CommentStore)
    store.list_by_slug.return_value = []
    store.delete_by_id.return_value = 0

    app.dependency_overrides[get_store] = lambda: store
    return store


@pytest.fixture
def failing_store(mock_store):
    error = OperationalError(
        "SELECT 1", {}, ConnectionRefusedError("secret-host:3306 refused")
    )
    mock_store.insert.side_effect = error
    mock_store.list_by_slug.side_effect = error
    mock_store.delete_by_id.side_effect = error
    return mock_store
