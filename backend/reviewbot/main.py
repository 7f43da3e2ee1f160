from contextlib import asynccontextmanager

import structlog
from arq.connections import RedisSettings, create_pool
from fastapi import Depends, FastAPI
from fastapi.responses import PlainTextResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from reviewbot.config import VERSION, settings
from reviewbot.db.session import engine, get_db
from reviewbot.github import router as github_router
from reviewbot.logging_config import configure_logging
from reviewbot.slack import router as slack_router

configure_logging(settings.log_level)

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("starting up", version=VERSION)
    app.state.arq_pool = await create_pool(
        RedisSettings.from_dsn(settings.redis_url)
    )
    yield
    await app.state.arq_pool.close()
    await engine.dispose()
    log.info("shut down")


app = FastAPI(title="reviewbot", version=VERSION, lifespan=lifespan)

app.include_router(slack_router)
app.include_router(github_router)


@app.get("/health")
async def health(db: AsyncSession = Depends(get_db)):
    await db.execute(text("SELECT 1"))
    return {"status": "ok"}


@app.get("/liveness", response_class=PlainTextResponse)
async def liveness():
    return "reviewbot OK"
