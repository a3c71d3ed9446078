"""Minimal FastAPI app serving the aliasgate endpoints."""

import logging

from aliasgate.app import create_app
from aliasgate.config import AliasgateConfig

logging.basicConfig(level=logging.INFO)

# ALIASGATE_REDIS_URL=redis://localhost:6379/0 also pushes telemetry to Redis.
app = create_app(AliasgateConfig())
