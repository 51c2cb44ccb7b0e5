"""
Discovery Ranking API: FastAPI app factory.

Use: uvicorn server.app:app
Or:  from server import app
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_config
from .routes import register_routes
from .state import get_state

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build FastAPI app with CORS, routes, and startup."""
    config = get_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(
        title="Discovery Ranking API",
        description="Ranked discovery pools, swipes, and undo for a matching platform",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)

    @app.on_event("startup")
    def _startup():
        config = get_config()
        is_valid, errors = config.validate()
        for error in errors:
            logger.warning("[startup] Config: %s", error)
        state = get_state()
        logger.info(
            "[startup] Discovery Ranking API starting (data_source=%s, valid=%s, weights=%s)",
            config.data_source, is_valid, state.ranking_config.hybrid_weights,
        )

    return app


app = create_app()
