"""FastAPI application entrypoint."""

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from criticalcss.api import router as api_router
from criticalcss.api.routes.critical_css import CACHE_STATUS_HEADER, INVALID_URL_DETAIL
from criticalcss.core.config import settings
from criticalcss.core.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    expose_headers=[CACHE_STATUS_HEADER],
)

app.include_router(api_router.api_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer invalid JSON bodies with the same 400 the query-string route gives."""

    fields = {str(part) for error in exc.errors() for part in error.get("loc", ())}
    detail = INVALID_URL_DETAIL if "url" in fields else "Invalid request"
    logger.info("request_validation_failed", path=request.url.path, fields=sorted(fields))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.get("/health", tags=["health"])
@app.get("/healthz", tags=["health"])
def health_check() -> dict:
    """Simple health probe endpoint."""

    logger.debug("health_check_invoked")
    return {"ok": True, "status": "ok", "environment": settings.environment, "sha": settings.git_sha}


def run() -> None:
    """Serve the API with uvicorn on all interfaces."""

    logger.info("criticalcss_listening", port=settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)
