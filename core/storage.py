import logging
from functools import lru_cache
from urllib.parse import quote

import boto3
from botocore.config import Config

from core.config import settings

log = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_s3_client():
    return boto3.client(
        "s3",
        endpoint_url=settings.S3_ENDPOINT,
        aws_access_key_id=settings.S3_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY or None,
        config=Config(signature_version="s3v4"),
        region_name=settings.S3_REGION,
    )


def public_url_from_key(key: str) -> str | None:
    base = settings.S3_PUBLIC_BASE_URL
    if not base:
        return None
    return f"{base.rstrip('/')}/{quote(key, safe='')}"


def get_signed_get_url(bucket: str, key: str, expires_in: int | None = None) -> str:
    return get_s3_client().generate_presigned_url(
        "get_object",
        Params={"Bucket": bucket, "Key": key},
        ExpiresIn=expires_in or settings.SIGNED_URL_TTL_SECONDS,
    )


def get_signed_put_url(bucket: str, key: str, content_type: str, expires_in: int | None = None) -> str:
    return get_s3_client().generate_presigned_url(
        "put_object",
        Params={"Bucket": bucket, "Key": key, "ContentType": content_type},
        ExpiresIn=expires_in or settings.SIGNED_URL_TTL_SECONDS,
    )


def resolve_asset_url(key: str) -> str | None:
    """Public URL when a CDN base is configured, else a signed GET URL.

    Signing failures degrade to None so one bad asset cannot fail a response.
    """
    url = public_url_from_key(key)
    if url:
        return url
    try:
        return get_signed_get_url(settings.S3_BUCKET_PUBLIC, key)
    except Exception as e:
        log.warning("Could not sign URL for %s: %s", key, e)
        return None
