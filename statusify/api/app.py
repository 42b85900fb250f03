"""FastAPI app and route registration."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

# Configure logging in the worker process (so poller/session INFO logs are visible with uvicorn --reload)
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)

from statusify.api.state import AppState, get_state
from statusify.config import ensure_data_dir

# Import routes after state to avoid circular imports
from statusify.api.routes import spotify, status

__all__ = ["app", "AppState", "get_state"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_data_dir()
    state = get_state()
    # PersistenceError here aborts startup
    state.startup()
    logging.getLogger(__name__).info("Spotify session: %s", state.session.state.name)

    yield

    state.shutdown()


app = FastAPI(
    title="Statusify",
    description="Mirror the currently playing Spotify track into your Slack status",
    lifespan=lifespan,
)

app.include_router(spotify.router, tags=["spotify"])
app.include_router(status.router, prefix="/api", tags=["status"])
