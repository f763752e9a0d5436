"""Storage for uploaded articles.

Two backends share the same ``store(key, content, content_type)`` and
``delete(key)`` contract: an S3/MinIO bucket via boto3 and a local directory
for development.
Backend failures are raised as ``ExternalServiceError``.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from werkzeug.utils import secure_filename

from conference_site.errors import ExternalServiceError

logger = logging.getLogger(__name__)

ARTICLES_PREFIX = 'articles'


def generate_storage_key(code: str, upload_id: str, filename: str) -> str:
    """Key for one uploaded file.

    Format: articles/{code}/{upload_id}/{sanitized filename}
    """
    safe_name = secure_filename(filename or '') or 'article'
    return f"{ARTICLES_PREFIX}/{code}/{upload_id}/{safe_name}"


class LocalFileStorage:
    def __init__(self, root: str):
        self.root = root

    def _path_for(self, key: str) -> str:
        path = os.path.abspath(os.path.join(self.root, *key.split('/')))
        if not path.startswith(os.path.abspath(self.root) + os.sep):
            raise ExternalServiceError('storage', f'Invalid storage key: {key}')
        return path

    def store(self, key: str, content: bytes, content_type: Optional[str] = None) -> int:
        path = self._path_for(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'wb') as fh:
                fh.write(content)
        except OSError as e:
            logger.error(f"[Local-Upload] Failed to write {key}: {e}")
            raise ExternalServiceError('storage', 'Failed to store file') from e
        logger.info(f"[Local-Upload] Stored: {key} ({len(content)} bytes)")
        return len(content)

    def delete(self, key: str) -> None:
        try:
            os.remove(self._path_for(key))
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"[Local-Upload] Failed to delete {key}: {e}")


class S3Storage:
    """S3 or MinIO bucket; MinIO is selected by passing ``endpoint_url``."""

    def __init__(self, bucket: str, endpoint_url: Optional[str] = None,
                 access_key: Optional[str] = None, secret_key: Optional[str] = None,
                 region: str = 'us-east-1', timeout: float = 5, client=None):
        self.bucket = bucket
        if client is None:
            client = boto3.client(
                's3',
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
                config=BotoConfig(
                    signature_version='s3v4',
                    s3={'addressing_style': 'path'},
                    connect_timeout=timeout,
                    read_timeout=timeout,
                    retries={'max_attempts': 1},
                ),
            )
        self._client = client

    def store(self, key: str, content: bytes, content_type: Optional[str] = None) -> int:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type or 'application/octet-stream',
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"[S3-Upload] Failed to upload {key}: {e}")
            raise ExternalServiceError('storage', 'Failed to store file') from e
        logger.info(f"[S3-Upload] Uploaded: {key} ({len(content)} bytes)")
        return len(content)

    def delete(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"[S3-Upload] Failed to delete {key}: {e}")


def create_storage(config):
    backend = (config.get('STORAGE_BACKEND') or 'local').lower()
    if backend == 's3':
        return S3Storage(
            bucket=config.get('S3_BUCKET'),
            endpoint_url=config.get('S3_ENDPOINT_URL'),
            access_key=config.get('AWS_ACCESS_KEY_ID'),
            secret_key=config.get('AWS_SECRET_ACCESS_KEY'),
            region=config.get('AWS_REGION') or 'us-east-1',
            timeout=config.get('HTTP_TIMEOUT_SECONDS', 5),
        )
    return LocalFileStorage(config.get('UPLOAD_FOLDER') or os.path.join(os.getcwd(), 'uploads'))
