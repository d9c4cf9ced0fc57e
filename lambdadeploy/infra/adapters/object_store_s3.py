from __future__ import annotations

from typing import Any, Dict
from urllib.parse import quote

from ..contracts import ObjectStore
from ..errors import ArtifactFetchError, ObjectStoreError
from ..models import ArtifactLocation, ArtifactPayload


class S3ObjectStore(ObjectStore):
    """ObjectStore backed by an injected boto3 S3 client."""

    def __init__(self, client: Any):
        self.client = client

    def describe(self) -> Dict[str, Any]:
        return {"class": self.__class__.__name__, "service": "s3"}

    def object_url(self, location: ArtifactLocation) -> str:
        """Virtual-hosted HTTPS URL of an object, in the client's region when known."""
        region = str(getattr(getattr(self.client, "meta", None), "region_name", "") or "")
        host = f"{location.bucket}.s3.{region}.amazonaws.com" if region else f"{location.bucket}.s3.amazonaws.com"
        return f"https://{host}/{quote(location.key, safe='/')}"

    def get_object(self, name: str, location: ArtifactLocation) -> ArtifactPayload:
        from botocore.exceptions import BotoCoreError, ClientError

        if not location.bucket or not location.key:
            raise ArtifactFetchError(f"artifact {name!r} has an incomplete location: {location.uri}")

        try:
            resp = self.client.get_object(Bucket=location.bucket, Key=location.key)
            body = resp["Body"].read()
        except (ClientError, BotoCoreError) as e:
            raise ArtifactFetchError(f"artifact {name!r} fetch failed: {location.uri} ({e})") from e

        return ArtifactPayload(
            name=name,
            data=bytes(body),
            location=location,
            content_type=str(resp.get("ContentType", "") or ""),
            metadata=dict(resp.get("Metadata") or {}),
        )

    def put_object(self, location: ArtifactLocation, body: bytes, content_type: str = "") -> Dict[str, str]:
        from botocore.exceptions import BotoCoreError, ClientError

        extra: Dict[str, Any] = {}
        ct = str(content_type or "").strip()
        if ct:
            extra["ContentType"] = ct

        try:
            resp = self.client.put_object(Bucket=location.bucket, Key=location.key, Body=body, **extra)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"S3 upload failed: {location.uri} ({e})") from e

        return {
            "uri": location.uri,
            "url": self.object_url(location),
            "etag": str(resp.get("ETag", "") or "").strip('"'),
        }
