"""
S3Client - Object store operations for album renditions and manifests.
"""

import logging
from typing import Iterable, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, HTTPClientError
from botocore.exceptions import ConnectionError as BotoConnectionError
from retrying import Retrying

from .errors import NotFoundError, StoreError
from .s3_config import S3Config


class S3Client:
    """
    Wrapper for S3-compatible object storage.

    Every call is per-object atomic; nothing here spans objects. Puts and
    gets retry transient failures with bounded exponential backoff,
    everything else surfaces at once.
    """

    NOT_FOUND_CODES = {'404', 'NoSuchKey', 'NotFound'}
    TRANSIENT_CODES = {
        'InternalError', 'ServiceUnavailable', 'SlowDown', 'Throttling',
        'ThrottlingException', 'RequestTimeout', 'RequestTimeoutException',
    }
    DELETE_BATCH_SIZE = 1000

    def __init__(self, config: S3Config, logger: Optional[logging.Logger] = None):
        """
        Initialize S3 client.

        Args:
            config: S3 configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

        s3_options = {'addressing_style': 'path'} if config.endpoint else {}
        self._client = boto3.client(
            's3',
            endpoint_url=config.endpoint,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
            config=Config(
                signature_version='s3v4',
                s3=s3_options,
                connect_timeout=config.connect_timeout,
                read_timeout=config.read_timeout,
                retries={'total_max_attempts': 1, 'mode': 'standard'},
            ),
            verify=config.verify_ssl
        )

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    @property
    def bucket(self) -> str:
        return self.config.bucket

    def put(self, key: str, data: bytes, content_type: str = 'image/jpeg') -> None:
        """
        Upload an object, retrying transient failures.

        Raises:
            StoreError: fatal=True for auth/permission/bucket errors,
                fatal=False once retries are exhausted
        """
        self.logger.debug(f"S3 PUT: bucket={self.bucket}, key={key}, size={len(data)} bytes")
        try:
            self._retrying().call(self._put_once, key, data, content_type)
        except StoreError as e:
            if e.fatal:
                raise
            raise StoreError(
                f"Upload of {key} failed after {self.config.max_attempts} attempts: {e}",
                key=key
            ) from e

    def get(self, key: str) -> bytes:
        """
        Download an object.

        Raises:
            NotFoundError: Object does not exist
            StoreError: Any other failure
        """
        self.logger.debug(f"S3 GET: bucket={self.bucket}, key={key}")
        return self._retrying().call(self._get_once, key)

    def list(self, prefix: str) -> List[str]:
        """List every key under prefix."""
        keys = []
        try:
            paginator = self._client.get_paginator('list_objects_v2')
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for obj in page.get('Contents', []):
                    keys.append(obj['Key'])
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, prefix) from e
        return keys

    def delete_many(self, keys: Iterable[str]) -> List[str]:
        """
        Delete objects in batches.

        Partial failure is reported, not raised.

        Returns:
            Keys that were not confirmed deleted
        """
        keys = list(keys)
        failed = []
        for start in range(0, len(keys), self.DELETE_BATCH_SIZE):
            batch = keys[start:start + self.DELETE_BATCH_SIZE]
            try:
                response = self._client.delete_objects(
                    Bucket=self.bucket,
                    Delete={'Objects': [{'Key': k} for k in batch], 'Quiet': True}
                )
            except (ClientError, BotoCoreError) as e:
                self.logger.error(f"Batch delete of {len(batch)} objects failed: {e}")
                failed.extend(batch)
                continue

            for error in response.get('Errors', []):
                self.logger.warning(
                    f"Could not delete {error.get('Key')}: {error.get('Code')} {error.get('Message', '')}"
                )
                failed.append(error.get('Key'))
        return failed

    def presigned_url(
        self,
        key: str,
        expires_in: Optional[int] = None,
        download_name: Optional[str] = None
    ) -> str:
        """
        Generate a time-limited GET URL for an object.

        Args:
            key: Object key
            expires_in: Lifetime in seconds (default: config.url_expiry)
            download_name: If set, browsers save the object under this name
        """
        params = {'Bucket': self.bucket, 'Key': key}
        if download_name:
            quoted = download_name.replace('"', '')
            params['ResponseContentDisposition'] = f'attachment; filename="{quoted}"'
        return self._client.generate_presigned_url(
            'get_object',
            Params=params,
            ExpiresIn=expires_in or self.config.url_expiry
        )

    def _retrying(self) -> Retrying:
        return Retrying(
            retry_on_exception=self._is_transient,
            stop_max_attempt_number=self.config.max_attempts,
            wait_exponential_multiplier=self.config.backoff_ms,
            wait_exponential_max=self.config.backoff_max_ms,
        )

    @staticmethod
    def _is_transient(exc: Exception) -> bool:
        return isinstance(exc, StoreError) and not exc.fatal

    def _put_once(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type
            )
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, key) from e

    def _get_once(self, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
            return response['Body'].read()
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, key) from e

    def _translate(self, error: Exception, key: str) -> Exception:
        """Map a botocore error onto NotFoundError or StoreError."""
        if isinstance(error, ClientError):
            code = str(error.response.get('Error', {}).get('Code', ''))
            status = error.response.get('ResponseMetadata', {}).get('HTTPStatusCode', 0)
            if code in self.NOT_FOUND_CODES:
                return NotFoundError(f"Object not found: {key}")
            transient = code in self.TRANSIENT_CODES or status >= 500 or code.startswith('5')
            return StoreError(f"S3 error on {key}: {code or status}", key=key, fatal=not transient)

        transient = isinstance(error, (BotoConnectionError, HTTPClientError))
        return StoreError(f"S3 error on {key}: {error}", key=key, fatal=not transient)
