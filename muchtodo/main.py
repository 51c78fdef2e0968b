from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from muchtodo.common.health import router as health_router
from muchtodo.config import APP_NAME, APP_VERSION, Config, load_config
from muchtodo.database import close_mongo_connection, connect_to_mongo
from muchtodo.logging_config import configure_logging


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Builds the application from a loaded configuration, reading the environment if none is given."""
    if config is None:
        config = load_config()
    configure_logging(config.log_level, config.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await connect_to_mongo(config)
        yield
        await close_mongo_connection()

    app = FastAPI(
        title=APP_NAME,
        version=APP_VERSION,
        description="Backend for the MuchToDo task manager",
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, prefix="", tags=["Monitoring"])
    return app
