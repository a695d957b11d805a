import re
from datetime import datetime, timezone
from typing import Callable, List, Optional
from urllib.parse import quote

from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from imagevault.config import Settings
from imagevault.keywords import (
    KEYWORDS_TAG,
    decode_keywords,
    matches,
    parse_keywords,
    tagging_header,
)
from imagevault.models import (
    ErrorKind,
    GatewayError,
    Outcome,
    SearchItem,
    UploadResult,
)
from imagevault.store import ObjectStore

# Characters encodeURI leaves alone on top of quote()'s defaults
_URI_SAFE = "!*'();,/?:@&=+$#"

STORE_ERRORS = (ClientError, BotoCoreError)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, ':' and '.' replaced by '-'."""
    iso = moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    iso = f"{iso}.{moment.microsecond // 1000:03d}Z"
    return re.sub(r"[:.]", "-", iso)


def sanitize_filename(filename: str) -> str:
    return re.sub(r"\s+", "_", filename)


def build_key(prefix: str, filename: str, moment: datetime) -> str:
    return f"{prefix}{format_timestamp(moment)}-{sanitize_filename(filename)}"


class ImageGateway:
    """
    Brokers uploads and keyword searches against an ObjectStore.

    Holds no state between calls. Every operation returns an Outcome so the
    caller decides how each error kind is surfaced.
    """

    def __init__(self, settings: Settings, store: ObjectStore, clock: Callable[[], datetime] = utc_now):
        self.settings = settings
        self.store = store
        self.clock = clock

    def public_url(self, key: str) -> str:
        return (
            f"https://{self.settings.AWS_S3_BUCKET}.s3.{self.settings.AWS_REGION}"
            f".amazonaws.com/{quote(key, safe=_URI_SAFE)}"
        )

    def check_configuration(self) -> Optional[GatewayError]:
        missing = self.settings.missing_settings()
        if not missing:
            return None
        logger.warning("Gateway not configured, missing={}", missing)
        return GatewayError(
            kind=ErrorKind.CONFIGURATION,
            message="Server not configured",
            missing=missing,
        )

    async def store_image(
        self,
        data: Optional[bytes],
        content_type: Optional[str],
        filename: Optional[str],
        keywords_csv: Optional[str] = None,
    ) -> Outcome[UploadResult]:
        config_error = self.check_configuration()
        if config_error:
            return Outcome[UploadResult].failure(config_error)

        if data is None:
            return Outcome[UploadResult].failure(
                GatewayError(kind=ErrorKind.VALIDATION, message="No image uploaded")
            )
        if not data:
            return Outcome[UploadResult].failure(
                GatewayError(kind=ErrorKind.VALIDATION, message="Uploaded image is empty")
            )
        if len(data) > self.settings.MAX_UPLOAD_BYTES:
            return Outcome[UploadResult].failure(
                GatewayError(
                    kind=ErrorKind.VALIDATION,
                    message="Image too large",
                    details=f"Images are limited to {self.settings.MAX_UPLOAD_BYTES} bytes",
                )
            )

        original_name = sanitize_filename(filename or "upload")
        key = build_key(self.settings.UPLOAD_PREFIX, original_name, self.clock())
        keywords = parse_keywords(keywords_csv)

        try:
            await self.store.put_object(
                key,
                data,
                content_type or "application/octet-stream",
                metadata={"originalname": original_name},
                tagging=tagging_header(keywords),
            )
        except STORE_ERRORS as e:
            logger.exception("Upload error key={}", key)
            return Outcome[UploadResult].failure(
                GatewayError(kind=ErrorKind.STORE, message="Upload failed", details=str(e))
            )

        logger.info("Stored key={} size_bytes={} keywords={}", key, len(data), keywords)
        return Outcome[UploadResult].success(
            UploadResult(key=key, url=self.public_url(key), keywords=keywords)
        )

    async def search_images(self, query: Optional[str] = None) -> Outcome[List[SearchItem]]:
        config_error = self.check_configuration()
        if config_error:
            return Outcome[List[SearchItem]].failure(config_error)

        needle = (query or "").lower()
        results: List[SearchItem] = []
        try:
            objects = await self.store.list_objects(self.settings.UPLOAD_PREFIX)
            # One tag lookup per object, serially
            for obj in objects:
                if not obj.key or obj.size == 0:
                    continue
                tags = await self.store.get_object_tags(obj.key)
                keywords = decode_keywords(tags.get(KEYWORDS_TAG))
                if matches(keywords, needle):
                    results.append(SearchItem(key=obj.key, url=self.public_url(obj.key), keywords=keywords))
        except STORE_ERRORS as e:
            logger.exception("Search error query={!r}", needle)
            return Outcome[List[SearchItem]].failure(
                GatewayError(kind=ErrorKind.STORE, message="Search failed", details=str(e))
            )

        logger.info("Search query={!r} scanned={} matched={}", needle, len(objects), len(results))
        return Outcome[List[SearchItem]].success(results)
