"""
Image Fetcher Module
Normalizes product and avatar images into byte-accurate payloads for Gemini
"""
import os
import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

import requests
from dotenv import load_dotenv
from google.genai import types

load_dotenv()

from errors import FetchError, EmptyContentError
from logging_config import get_logger, get_request_logger

logger = get_logger('fetcher')

FETCH_TIMEOUT = int(os.getenv('FETCH_TIMEOUT', 30))

# Anything smaller cannot be a real image
MIN_IMAGE_BYTES = 20

DEFAULT_MIME = 'image/png'

MIME_BY_EXTENSION = {
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.webp': 'image/webp',
    '.gif': 'image/gif',
}


@dataclass
class ImagePayload:
    data: bytes
    mime_type: str
    url: Optional[str] = None

    def to_part(self) -> types.Part:
        """Inline image part for generate_content"""
        return types.Part.from_bytes(data=self.data, mime_type=self.mime_type)


def mime_from_extension(url: str) -> str:
    """Infer an image MIME type from a URL or file name, defaulting to PNG."""
    path = urlsplit(url).path if '://' in url else url
    path = path.lower()
    for ext, mime in MIME_BY_EXTENSION.items():
        if path.endswith(ext):
            return mime
    return DEFAULT_MIME


def _mime_from_header(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    mime = content_type.split(';')[0].strip().lower()
    return mime if mime.startswith('image/') else None


def fetch_image(url: str, request_id: str = None) -> ImagePayload:
    """
    Download an image URL (following redirects) into an ImagePayload.

    Args:
        url: Public image URL
        request_id: Optional request ID for logging

    Returns:
        ImagePayload with bytes, MIME type and the source URL

    Raises:
        FetchError: request failed or non-success status
        EmptyContentError: body smaller than MIN_IMAGE_BYTES
    """
    log = get_request_logger('fetcher', request_id) if request_id else logger
    log.debug(f"Fetching image: {url[:80]}")
    start_time = time.time()

    try:
        response = requests.get(url, allow_redirects=True, timeout=FETCH_TIMEOUT)
    except requests.exceptions.RequestException as e:
        log.error(f"Image request failed: {str(e)}")
        raise FetchError(f'Failed to fetch image: {str(e)}')

    elapsed = time.time() - start_time
    log.debug(f"Image response: status={response.status_code}, time={elapsed:.2f}s")

    if not 200 <= response.status_code < 300:
        raise FetchError(f'Failed to fetch image. Status {response.status_code}')

    data = response.content
    if not data or len(data) < MIN_IMAGE_BYTES:
        raise EmptyContentError('Fetched image is empty or too small.')

    mime_type = _mime_from_header(response.headers.get('content-type')) or mime_from_extension(url)
    log.info(f"Fetched image: {len(data)} bytes, {mime_type}")
    return ImagePayload(data=data, mime_type=mime_type, url=url)
