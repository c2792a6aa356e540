from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.exceptions import http_exception_handler
from app.core.logging_config import setup_logging
from app.services.progress_store import get_progress_store

setup_logging()
_logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = get_progress_store()
    if store.ping():
        _logger.info("Progress store connected")
    else:
        # Bulk operations still run; only progress polling is affected
        _logger.warning("Progress store not reachable, progress will not be visible")

    yield

    _logger.info("Shutting down catalog bulk operations API")


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    _logger.warning(f"Invalid request on {request.url.path}: {exc.errors()}")
    return PlainTextResponse("Invalid request body", status_code=400)


def create_app() -> FastAPI:
    app = FastAPI(title="Catalog Bulk Operations", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(api_router, prefix="/admin")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=5010)
