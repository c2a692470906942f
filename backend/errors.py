"""
Error types for the creative generation pipeline.

Every failure the pipeline can hit is a CreativeError subclass so routes can
log the specific kind while still answering the caller with one generic message.
"""


class CreativeError(Exception):
    """Base exception for creative generation errors"""
    pass


class MissingFieldError(CreativeError):
    """A required form field was not supplied"""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f'{field} is required')


class UserNotFoundError(CreativeError):
    """No user record matches the submitted email"""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f'No user found for {email}')


class FetchError(CreativeError):
    """Image URL could not be fetched or answered with a non-success status"""
    pass


class EmptyContentError(CreativeError):
    """Fetched image body is smaller than the minimum sane size"""
    pass


class MalformedModelOutputError(CreativeError):
    """Prompt response could not be parsed into textToImage/imageToVideo"""
    pass


class NoImageReturnedError(CreativeError):
    """Image response contained no inline image part"""
    pass


class GenerationError(CreativeError):
    """Gemini call itself failed"""
    pass


class StoreError(CreativeError):
    """Firestore operation failed"""
    pass


class ImageHostError(CreativeError):
    """Upload to the image host failed"""
    pass
