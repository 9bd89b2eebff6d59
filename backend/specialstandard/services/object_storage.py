"""
SpecialStandard Backend — Object Storage Service
=================================================

What:  Presigned GET URLs and prefix listings for the S3 bucket that holds
       resource material and newsletters.
How:   boto3 S3 client, created lazily on first use. Presigning is a local
       signing operation; listing is a blocking network call and runs in
       Starlette's threadpool so it does not stall the event loop.
Who:   Resource and newsletter routes, the /s3 endpoints.

Keys:
    Stored locations come in several shapes ("s3://bucket/path", "/path",
    "path"). `normalize_key` reduces all of them to the bare object key.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from specialstandard.config import settings
from specialstandard.exceptions import TransportError, UpstreamServiceError, ValidationError

logger = logging.getLogger(__name__)

SERVICE_NAME = "object_storage"

# S3 error code → HTTP status relayed to the client
_CLIENT_ERROR_STATUS = {
    "AccessDenied": 403,
    "NoSuchBucket": 404,
    "NoSuchKey": 404,
}


class S3Client(Protocol):
    """The subset of the boto3 S3 client this service uses."""

    def generate_presigned_url(
        self,
        ClientMethod: str,  # noqa: N803 - boto3 naming
        Params: Dict[str, str],  # noqa: N803 - boto3 naming
        ExpiresIn: int,  # noqa: N803 - boto3 naming
    ) -> str: ...

    def list_objects_v2(self, **kwargs: Any) -> Dict[str, Any]: ...


def normalize_key(location: str, bucket: Optional[str] = None) -> str:
    """
    Reduce a stored location to an object key.

        normalize_key("s3://bucket/a/b.pdf")  # 'a/b.pdf'
        normalize_key("/a/b.pdf")             # 'a/b.pdf'
    """
    key = (location or "").strip()
    if key.startswith("s3://"):
        key = key[len("s3://"):]
        _, _, rest = key.partition("/")
        key = rest
    elif bucket and key.startswith(f"{bucket}/"):
        key = key[len(bucket) + 1:]
    return key.lstrip("/")


def create_default_s3_client() -> S3Client:
    session = boto3.session.Session(
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        region_name=settings.aws_region,
    )
    return session.client("s3")


class ObjectStorageService:
    def __init__(self, bucket: Optional[str] = None, client: Optional[S3Client] = None):
        self.bucket = bucket if bucket is not None else settings.s3_bucket
        self._client = client

    @property
    def client(self) -> S3Client:
        if self._client is None:
            self._client = create_default_s3_client()
        return self._client

    def _client_error(self, e: ClientError, operation: str, target: str) -> UpstreamServiceError:
        code = e.response.get("Error", {}).get("Code", "Unknown")
        status = _CLIENT_ERROR_STATUS.get(code)
        if code == "AccessDenied":
            message = f"Access denied to bucket {self.bucket!r}"
        elif code == "NoSuchBucket":
            message = f"Bucket {self.bucket!r} does not exist"
        else:
            message = f"Object storage {operation} failed"
        logger.error("S3 %s failed for %r: %s (%s)", operation, target, code, str(e))
        return UpstreamServiceError(
            message=message,
            status_code=status,
            service=SERVICE_NAME,
            context={"s3_error": code},
        )

    def presign(self, key: str, expires_in: Optional[int] = None) -> str:
        """Presigned GET URL for `key`, valid for `expires_in` seconds."""
        key = normalize_key(key, self.bucket)
        if not key:
            raise ValidationError(message="Object key is empty", field="key")
        expiry = expires_in if expires_in is not None else settings.s3_presign_expiry
        try:
            return self.client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expiry,
            )
        except ClientError as e:
            raise self._client_error(e, "presign", key) from e
        except BotoCoreError as e:
            logger.error("S3 presign failed for %r: %s", key, str(e))
            raise UpstreamServiceError(
                message="Failed to generate presigned URL", service=SERVICE_NAME
            ) from e

    def try_presign(self, key: Optional[str], expires_in: Optional[int] = None) -> str:
        """Like `presign`, but a failure is logged and gives an empty URL."""
        if not key:
            return ""
        try:
            return self.presign(key, expires_in)
        except (UpstreamServiceError, ValidationError) as e:
            logger.warning("Presign skipped for key %r: %s", key, e.message)
            return ""

    async def list_by_prefix(self, prefix: str) -> List[str]:
        """Every key under `prefix`, following continuation tokens."""
        keys: List[str] = []
        kwargs: Dict[str, Any] = {"Bucket": self.bucket, "Prefix": prefix}
        while True:
            try:
                page = await run_in_threadpool(self.client.list_objects_v2, **kwargs)
            except ClientError as e:
                raise self._client_error(e, "list", prefix) from e
            except BotoCoreError as e:
                logger.error("S3 list failed for prefix %r: %s", prefix, str(e))
                raise TransportError(context={"service": SERVICE_NAME}) from e
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
            if not page.get("IsTruncated"):
                return keys
            kwargs["ContinuationToken"] = page["NextContinuationToken"]


object_storage = ObjectStorageService()
