"""
Image Host Module
Uploads product images and generated creatives to Firebase Storage
and returns their public URLs.
"""
import os
import base64
import binascii
from dataclasses import dataclass
from typing import Union

from dotenv import load_dotenv
from firebase_admin import storage

load_dotenv()

from errors import ImageHostError
from firebase_app import get_firebase_app
from image_fetcher import mime_from_extension
from logging_config import get_logger

logger = get_logger('image_host')

STORAGE_PREFIX = os.getenv('STORAGE_PREFIX', 'product-ads').strip('/')


@dataclass
class UploadResult:
    url: str
    path: str


def decode_upload(data: Union[bytes, str], file_name: str) -> tuple[bytes, str]:
    """
    Accept raw bytes, a data URL or a bare base64 string.

    Returns:
        (raw bytes, content type)
    """
    if isinstance(data, bytes):
        return data, mime_from_extension(file_name)

    content_type = mime_from_extension(file_name)
    payload = data
    if data.startswith('data:'):
        header, _, payload = data.partition(',')
        declared = header[len('data:'):].split(';')[0]
        if declared:
            content_type = declared

    try:
        return base64.b64decode(payload, validate=True), content_type
    except (binascii.Error, ValueError) as e:
        raise ImageHostError(f'Upload payload is not valid base64: {e}')


class StorageImageHost:
    """Public-object uploads to the default Firebase Storage bucket."""

    def __init__(self, bucket=None, prefix: str = STORAGE_PREFIX):
        self._bucket = bucket
        self.prefix = prefix

    @property
    def bucket(self):
        if self._bucket is None:
            self._bucket = storage.bucket(app=get_firebase_app())
        return self._bucket

    def upload(self, data: Union[bytes, str], file_name: str) -> UploadResult:
        """
        Upload an image and make it publicly readable.

        Args:
            data: Image bytes, data URL or base64 string
            file_name: Object name inside the prefix (e.g. 'generate-1700000000000.png')

        Returns:
            UploadResult with the public URL
        """
        raw, content_type = decode_upload(data, file_name)
        path = f'{self.prefix}/{file_name}' if self.prefix else file_name

        try:
            blob = self.bucket.blob(path)
            blob.upload_from_string(raw, content_type=content_type)
            blob.make_public()
        except Exception as e:
            logger.error(f"Upload failed for {path}: {e}")
            raise ImageHostError(f'Failed to upload {file_name}: {str(e)}')

        logger.info(f"Uploaded {path} ({len(raw)} bytes, {content_type})")
        return UploadResult(url=blob.public_url, path=path)
