from abc import ABCMeta, abstractmethod
from typing import Dict, List, Optional

import aioboto3
from botocore.exceptions import ClientError
from loguru import logger

from imagevault.config import Settings
from imagevault.models import StoredObject


class ObjectStore(metaclass=ABCMeta):
    """Key/value blob store with per-object string tags."""

    @abstractmethod
    async def put_object(
        self,
        key: str,
        body: bytes,
        content_type: str,
        metadata: Optional[Dict[str, str]] = None,
        tagging: Optional[str] = None,
    ) -> None:
        return NotImplemented

    @abstractmethod
    async def list_objects(self, prefix: str) -> List[StoredObject]:
        return NotImplemented

    @abstractmethod
    async def get_object_tags(self, key: str) -> Dict[str, str]:
        return NotImplemented


class S3ObjectStore(ObjectStore):
    def __init__(self, settings: Settings):
        self.settings = settings
        self.session = aioboto3.Session()

    def _client(self):
        return self.session.client("s3",
                                   region_name=self.settings.AWS_REGION,
                                   endpoint_url=self.settings.aws_endpoint,
                                   aws_access_key_id=self.settings.AWS_ACCESS_KEY_ID,
                                   aws_secret_access_key=self.settings.AWS_SECRET_ACCESS_KEY)

    async def put_object(self, key, body, content_type, metadata=None, tagging=None):
        params = {
            "Bucket": self.settings.AWS_S3_BUCKET,
            "Key": key,
            "Body": body,
            "ContentType": content_type,
            "Metadata": metadata or {},
        }
        if tagging:
            params["Tagging"] = tagging
        async with self._client() as s3:
            await s3.put_object(**params)

    async def list_objects(self, prefix):
        # First page only; buckets past the page size are truncated
        async with self._client() as s3:
            response = await s3.list_objects_v2(Bucket=self.settings.AWS_S3_BUCKET, Prefix=prefix)
        if response.get("IsTruncated"):
            logger.warning("Listing under {} is truncated; only the first page is searched", prefix)
        return [
            StoredObject(key=entry.get("Key"), size=entry.get("Size", 0))
            for entry in response.get("Contents", [])
        ]

    async def get_object_tags(self, key):
        async with self._client() as s3:
            response = await s3.get_object_tagging(Bucket=self.settings.AWS_S3_BUCKET, Key=key)
        return {tag["Key"]: tag.get("Value", "") for tag in response.get("TagSet", [])}

    async def ensure_bucket(self) -> None:
        """Create the bucket if it does not exist yet. Meant for LocalStack."""
        bucket = self.settings.AWS_S3_BUCKET
        async with self._client() as s3:
            try:
                await s3.head_bucket(Bucket=bucket)
                logger.info("Bucket {} exists.", bucket)
            except ClientError:
                logger.info("Creating bucket {}...", bucket)
                params = {"Bucket": bucket}
                if self.settings.AWS_REGION != "us-east-1":
                    params["CreateBucketConfiguration"] = {"LocationConstraint": self.settings.AWS_REGION}
                await s3.create_bucket(**params)
