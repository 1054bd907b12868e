
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import os

from face_portal.exceptions import MissingFieldError, PortalError
from face_portal.models import ErrorResponse
from face_portal.routes import faces, proxy
from face_portal.services.upstream import RELAYED_HEADERS, UpstreamClient
from face_portal.utils.config import settings
from face_portal.utils.logger import setup_logging

setup_logging(logging.DEBUG if settings.DEBUG else logging.INFO, settings.LOG_DIR)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):

    logger.info("Starting Face Portal proxy backend...")
    logger.info(f"Proxying to Face Rec API: {settings.FACE_REC_API_URL}")
    logger.info(f"Accepting requests from origin: {settings.CORS_ORIGIN}")

    app.state.upstream = UpstreamClient(settings)

    yield

    logger.info("Shutting down upstream client...")
    await app.state.upstream.close()


app = FastAPI(
    title="Face Portal Proxy API",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Type", *RELAYED_HEADERS],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url}")
    return await call_next(request)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    fields = [str(error["loc"][-1]) for error in errors if error.get("loc")]
    message = "No image file found in proxy request" if "image" in fields else "Malformed request"
    logger.error(f"Rejected malformed request to {request.url.path}: {fields}")
    details = [
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in errors
    ]
    return await portal_error_handler(request, MissingFieldError(message, details=details))


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing required field"},
    503: {"model": ErrorResponse, "description": "Backend API unreachable"},
    504: {"model": ErrorResponse, "description": "Backend API timed out"},
}

app.include_router(proxy.router, prefix="/api/proxy", tags=["Proxy"], responses=ERROR_RESPONSES)
app.include_router(faces.router, prefix="/api/proxy", tags=["Faces"], responses=ERROR_RESPONSES)


@app.get("/api/health")
async def health():
    return {"status": "UP", "message": "Proxy backend is running"}


def ssl_options() -> dict:
    """uvicorn TLS arguments, or an empty dict when the certificate files are missing."""
    key_path = settings.SSL_PRIVATE_KEY_PATH
    cert_path = settings.SSL_FULLCHAIN_CERT_PATH
    if os.path.exists(key_path) and os.path.exists(cert_path):
        logger.info("SSL Certificates found. Will attempt to start HTTPS server.")
        return {"ssl_keyfile": key_path, "ssl_certfile": cert_path}

    logger.warning("SSL Certificate files not found at specified paths. Falling back to HTTP.")
    logger.warning(f"Checked for key: {key_path}")
    logger.warning(f"Checked for cert: {cert_path}")
    return {}


def run():
    import uvicorn

    uvicorn.run(
        "face_portal.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        **ssl_options()
    )


if __name__ == "__main__":
    run()
