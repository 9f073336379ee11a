from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from cherrypick.api.cherry_pick import router as cherry_pick_router
from cherrypick.api.deps import get_session
from cherrypick.api.repos import router as repos_router
from cherrypick.core.config import settings
from cherrypick.core.logging import configure_logging
from cherrypick.core.terminal_ui import ui

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    session = await get_session()
    ui.success(
        f"Serving {session.source.name} -> {session.target.name}",
        "Backend",
    )
    ui.panel(
        "REST API: /api/repos, /api/analyze, /api/cherry-pick\nHealth: /api/health",
        title="Available Endpoints",
        style="green",
    )
    ui.status_line({
        "Environment": os.getenv("ENVIRONMENT", "development"),
        "Classifier": "enabled" if settings.classifier_enabled else "heuristic only",
        "Port": str(settings.api_port),
    })
    yield


app = FastAPI(title="Cherry-Pick API", lifespan=lifespan)


class LogFilterMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Health probes are polled constantly
        if request.url.path.endswith("/health"):
            logger = logging.getLogger("uvicorn.access")
            original_disabled = logger.disabled
            logger.disabled = True
            try:
                response = await call_next(request)
            finally:
                logger.disabled = original_disabled
        else:
            response = await call_next(request)
        return response


app.add_middleware(LogFilterMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(repos_router)
app.include_router(cherry_pick_router)


@app.get("/health")
@app.get("/api/health")
def health():
    return {"ok": True}
