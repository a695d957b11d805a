import sys
import time
from contextlib import asynccontextmanager
from uuid import uuid4

import uvicorn
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from loguru import logger
from mangum import Mangum

from imagevault.config import Settings, settings
from imagevault.routers import health, images
from imagevault.store import S3ObjectStore


def _configure_logging(app_settings: Settings) -> None:
    logger.configure(patcher=lambda record: record["extra"].setdefault("request_id", "-"))
    logger.remove()
    logger.add(
        sys.stderr,
        level=app_settings.LOG_LEVEL.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | req={extra[request_id]} | {name}:{function}:{line} | {message}",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    _configure_logging(settings)
    logger.info("Starting up... env={} region={} bucket={}", settings.ENV, settings.AWS_REGION, settings.AWS_S3_BUCKET)

    if not settings.AWS_S3_BUCKET:
        logger.warning("AWS_S3_BUCKET is not set. API will not work until configured.")
    elif settings.ENV in ("dev", "local") and settings.aws_endpoint and not settings.missing_settings():
        # LocalStack bootstrap
        try:
            await S3ObjectStore(settings).ensure_bucket()
        except (ClientError, BotoCoreError) as e:
            logger.warning("Failed to bootstrap S3: {}", e)

    yield
    logger.info("Shutting down...")


app = FastAPI(title="imagevault", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(images.router)


@app.middleware("http")
async def add_request_context(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid4()))
    # Every log line emitted while serving the request carries its id
    with logger.contextualize(request_id=request_id):
        logger.info("--> {} {}", request.method, request.url.path)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Request failed {} {}", request.method, request.url.path)
            raise
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info("<-- {} {} {} {:.2f}ms", request.method, request.url.path, response.status_code, duration_ms)
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/")
def read_root():
    return {"message": "Welcome to imagevault"}


def run():
    uvicorn.run("imagevault.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()

# Adapter for AWS Lambda
handler = Mangum(app)
