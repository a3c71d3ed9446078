"""Application factory wiring the aliasgate router, telemetry sink and Redis."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from redis import asyncio as aioredis

from aliasgate.catalog import check_deployment
from aliasgate.config import AliasgateConfig
from aliasgate.router import router
from aliasgate.telemetry import TelemetrySink

LOG = logging.getLogger(__name__)


def create_app(config: AliasgateConfig | None = None) -> FastAPI:
    if config is None:
        config = AliasgateConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        check_deployment(config)

        redis = aioredis.from_url(config.redis_url) if config.redis_url else None
        sink = TelemetrySink.from_config(config, redis)
        app.extra["aliasgate_telemetry"] = sink
        LOG.info("aliasgate started (environment=%s)", config.environment)

        try:
            async with sink.running():
                yield
        finally:
            if redis is not None:
                await redis.aclose()
            LOG.info("aliasgate stopped")

    app = FastAPI(lifespan=lifespan)
    app.extra["aliasgate_config"] = config
    app.include_router(router)
    return app
