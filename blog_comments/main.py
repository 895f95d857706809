import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blog_comments.dependencies import database

# 모델을 import하여 Base.metadata에 등록
import blog_comments.models.comment  # noqa: F401

from blog_comments.exception_handler import register_exception_handlers
from blog_comments.routers import comment as comment_router

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await database.startup()
    logger.info("blog comments API 시작")
    yield
    await database.shutdown()
    logger.info("blog comments API 종료")


app = FastAPI(title="Blog Comments API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(comment_router.router)


@app.get(
    "/health",
    tags=["Health Check"],
    summary="Health Check용 API",
)
async def health_check() -> str:
    return "ok"
