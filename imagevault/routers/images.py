from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse
from loguru import logger

from imagevault.config import Settings, get_settings
from imagevault.models import ErrorKind, GatewayError, SearchResponse, UploadResult
from imagevault.services import ImageGateway
from imagevault.store import ObjectStore, S3ObjectStore

router = APIRouter(prefix="/api", tags=["images"])

# Dependency Injection for the store and the gateway
def get_object_store(settings: Settings = Depends(get_settings)) -> ObjectStore:
    return S3ObjectStore(settings)

def get_gateway(
    settings: Settings = Depends(get_settings),
    store: ObjectStore = Depends(get_object_store),
) -> ImageGateway:
    return ImageGateway(settings, store)

def error_response(error: GatewayError) -> JSONResponse:
    if error.kind == ErrorKind.CONFIGURATION:
        return JSONResponse(status_code=500, content={"error": error.message, "missing": error.missing})
    status_code = 400 if error.kind == ErrorKind.VALIDATION else 500
    return JSONResponse(status_code=status_code, content={"error": error.message, "details": error.details})

@router.post("/upload", response_model=UploadResult)
async def upload_image(
    image: Optional[UploadFile] = File(default=None),
    keywords: Optional[str] = Form(default=None),
    gateway: ImageGateway = Depends(get_gateway),
):
    data = None
    if image is not None:
        # One byte past the cap is enough for the gateway to reject it
        data = await image.read(gateway.settings.MAX_UPLOAD_BYTES + 1)
    outcome = await gateway.store_image(
        data,
        image.content_type if image is not None else None,
        image.filename if image is not None else None,
        keywords,
    )
    if not outcome.ok:
        logger.info("Upload rejected kind={} error={}", outcome.error.kind.value, outcome.error.message)
        return error_response(outcome.error)
    return outcome.value

@router.get("/search", response_model=SearchResponse)
async def search_images(
    q: Optional[str] = Query(default=None, description="Keyword substring, case-insensitive"),
    gateway: ImageGateway = Depends(get_gateway),
):
    outcome = await gateway.search_images(q)
    if not outcome.ok:
        return error_response(outcome.error)
    return SearchResponse(items=outcome.value)
