"""
S3Config - Connection settings for the S3-compatible album bucket.
"""

import os
from dataclasses import dataclass
from typing import List, Optional


def _env(*names: str, default: Optional[str] = None) -> Optional[str]:
    """Return the first non-empty environment variable among names."""
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'y', 't')


@dataclass
class S3Config:
    """
    S3 configuration.

    Attributes:
        bucket: Bucket holding all albums
        endpoint: Endpoint URL for S3-compatible services (None for AWS)
        access_key: Access key id (None to use the default credential chain)
        secret_key: Secret access key
        region: Region name
        verify_ssl: Verify TLS certificates
        url_expiry: Lifetime of presigned download URLs in seconds
        max_attempts: Attempts per put before giving up
        backoff_ms: Base of the exponential backoff between attempts
        backoff_max_ms: Upper bound on a single backoff wait
        connect_timeout: Per-call connect timeout in seconds
        read_timeout: Per-call read timeout in seconds
    """
    bucket: Optional[str] = None
    endpoint: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: Optional[str] = None
    verify_ssl: bool = True
    url_expiry: int = 3600
    max_attempts: int = 3
    backoff_ms: int = 500
    backoff_max_ms: int = 8000
    connect_timeout: float = 10.0
    read_timeout: float = 60.0

    @classmethod
    def from_env(cls) -> 'S3Config':
        """Build configuration from environment variables."""
        return cls(
            bucket=_env('GALLERY_BUCKET', 'S3_BUCKET'),
            endpoint=_env('S3_ENDPOINT', 'AWS_ENDPOINT_URL'),
            access_key=_env('S3_ACCESS_KEY', 'AWS_ACCESS_KEY_ID'),
            secret_key=_env('S3_SECRET_KEY', 'AWS_SECRET_ACCESS_KEY'),
            region=_env('S3_REGION', 'AWS_REGION', 'AWS_DEFAULT_REGION'),
            verify_ssl=_env_bool('S3_VERIFY_SSL', True),
            url_expiry=int(_env('S3_URL_EXPIRY', default='3600')),
            max_attempts=int(_env('S3_MAX_ATTEMPTS', default='3')),
        )

    def validate(self) -> List[str]:
        """
        Check the configuration for problems.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        if not self.bucket:
            errors.append("S3 bucket not set (use --bucket or GALLERY_BUCKET)")
        if bool(self.access_key) != bool(self.secret_key):
            errors.append("S3 access key and secret key must be set together")
        if self.max_attempts < 1:
            errors.append("S3 max attempts must be at least 1")
        if self.url_expiry <= 0:
            errors.append("S3 URL expiry must be positive")
        return errors
