from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from session_scheduler.api.routes import inject_dependencies, router as api_router
from session_scheduler.config import settings
from session_scheduler.errors import SchedulerError
from session_scheduler.services.factory import build_orchestrator
from session_scheduler.services.orchestrator import SessionOrchestrator
from session_scheduler.utils.logger import get_logger

log = get_logger("main")


def _install_error_handlers(app: FastAPI) -> None:
    """Every error leaves as ``{"message": ...}``."""

    @app.exception_handler(SchedulerError)
    async def _scheduler_error(request: Request, exc: SchedulerError):
        if exc.status_code >= 500:
            log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": "Request body must be a JSON object"})

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        log.exception("%s %s crashed", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(orchestrator: SessionOrchestrator | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup / shutdown lifecycle."""
        # ── startup ──
        log.info("🚀 Starting %s", settings.APP_NAME)
        active = orchestrator or build_orchestrator(settings)
        inject_dependencies(active)
        log.info("Session orchestrator ready")

        yield

        # ── shutdown ──
        log.info("Shutting down…")
        inject_dependencies(None)
        active.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_error_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(
        "session_scheduler.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
