from datetime import datetime, timezone
from urllib.parse import parse_qsl

from botocore.exceptions import ClientError

from imagevault.config import Settings
from imagevault.models import StoredObject
from imagevault.store import ObjectStore

TEST_BUCKET = "test-images-bucket"
TEST_REGION = "eu-west-1"


class FakeObjectStore(ObjectStore):
    """In-memory stand-in for S3. Tagging strings are parsed the way S3 parses them."""

    def __init__(self):
        self.objects = {}
        self.calls = []
        self.fail_on = set()

    def _record(self, operation):
        self.calls.append(operation)
        if operation in self.fail_on:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, operation)

    async def put_object(self, key, body, content_type, metadata=None, tagging=None):
        self._record("PutObject")
        self.objects[key] = {
            "body": body,
            "content_type": content_type,
            "metadata": metadata or {},
            "tags": dict(parse_qsl(tagging)) if tagging else {},
        }

    async def list_objects(self, prefix):
        self._record("ListObjectsV2")
        return [
            StoredObject(key=key, size=len(obj["body"]))
            for key, obj in self.objects.items()
            if key.startswith(prefix)
        ]

    async def get_object_tags(self, key):
        self._record("GetObjectTagging")
        return dict(self.objects[key]["tags"])


class TickingClock:
    """Returns a distinct millisecond on every call so keys never collide."""

    def __init__(self, start=datetime(2024, 5, 1, 10, 20, 30, 123000, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        moment = self.current
        self.current = self.current.replace(microsecond=(self.current.microsecond + 1000) % 1000000)
        return moment


def make_settings(**overrides):
    values = {
        "AWS_S3_BUCKET": TEST_BUCKET,
        "AWS_REGION": TEST_REGION,
        "AWS_ACCESS_KEY_ID": "test",
        "AWS_SECRET_ACCESS_KEY": "test",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)
