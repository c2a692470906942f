"""
Request intake for product creative generation.

Turns the multipart form of POST /api/generate-product-image into an AdRequest.
"""
from dataclasses import dataclass
from typing import Optional

from errors import MissingFieldError

DEFAULT_UPLOAD_MIME = 'image/png'

# Avatar values this short are treated as "no avatar"
MIN_AVATAR_LENGTH = 2


@dataclass
class AdRequest:
    user_email: str
    description: str = ''
    size: str = ''
    avatar: str = ''
    image_url: str = ''
    file_bytes: Optional[bytes] = None
    file_mime: str = DEFAULT_UPLOAD_MIME

    @property
    def has_avatar(self) -> bool:
        return len(self.avatar) > MIN_AVATAR_LENGTH

    @property
    def has_upload(self) -> bool:
        """An existing imageUrl takes precedence over uploaded bytes."""
        return bool(self.file_bytes) and not self.image_url


def _read_upload(files) -> tuple[Optional[bytes], str]:
    """Read the optional 'file' part fully; returns (bytes or None, mime)."""
    upload = files.get('file') if files else None
    if upload is None:
        return None, DEFAULT_UPLOAD_MIME

    data = upload.read()
    if not data:
        return None, DEFAULT_UPLOAD_MIME
    return data, upload.mimetype or DEFAULT_UPLOAD_MIME


def parse_ad_request(form, files=None) -> AdRequest:
    """
    Validate the submitted form fields.

    Args:
        form: Form fields (request.form)
        files: Uploaded files (request.files)

    Returns:
        AdRequest

    Raises:
        MissingFieldError: userEmail missing, or neither file nor imageUrl given
    """
    user_email = (form.get('userEmail') or '').strip()
    if not user_email:
        raise MissingFieldError('userEmail')

    file_bytes, file_mime = _read_upload(files)
    image_url = (form.get('imageUrl') or '').strip()
    if not file_bytes and not image_url:
        raise MissingFieldError('file')

    return AdRequest(
        user_email=user_email,
        description=form.get('description') or '',
        size=form.get('size') or '',
        avatar=(form.get('avatar') or '').strip(),
        image_url=image_url,
        file_bytes=file_bytes,
        file_mime=file_mime,
    )
