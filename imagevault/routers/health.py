from fastapi import APIRouter, Depends

from imagevault.config import Settings, get_settings
from imagevault.models import DebugConfig, HealthResponse

router = APIRouter(prefix="/api", tags=["health"])

@router.get("/health", response_model=HealthResponse)
def health(settings: Settings = Depends(get_settings)):
    return HealthResponse(ok=True, region=settings.AWS_REGION, bucket=settings.AWS_S3_BUCKET)

# Diagnostic only: reports whether credentials are set, never their values
@router.get("/debug/config", response_model=DebugConfig)
def debug_config(settings: Settings = Depends(get_settings)):
    return DebugConfig(
        bucket=settings.AWS_S3_BUCKET,
        region=settings.AWS_REGION,
        hasAccessKey=bool(settings.AWS_ACCESS_KEY_ID),
        hasSecret=bool(settings.AWS_SECRET_ACCESS_KEY),
    )
