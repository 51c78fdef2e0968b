import logging
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from muchtodo.config import Config, load_config
from muchtodo.main import create_app


@pytest.fixture(autouse=True)
def restore_root_logger():
    """create_app() and configure_logging() install root handlers; put the originals back."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config() -> Config:
    """Configuration built from an environment with nothing set."""
    return load_config(environ={})


@pytest.fixture
def app(config: Config):
    return create_app(config)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    # ASGITransport does not run the lifespan, so no MongoDB is needed.
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
