"""
Creative Pipeline
Intake -> user lookup -> job record -> normalize -> prompts -> image -> publish

The job record lives from creation until it is either marked completed or
deleted because a later step failed. There is no failed state and no retry.
"""
import base64
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from ad_request import AdRequest
from errors import UserNotFoundError
from firestore_store import USERS_COLLECTION, ADS_COLLECTION
from gemini_service import CreativePrompts, InlineImage
from image_fetcher import ImagePayload, fetch_image
from logging_config import get_logger, get_request_logger

logger = get_logger('pipeline')

STATUS_PENDING = 'pending'
STATUS_COMPLETED = 'completed'


def _now_ms() -> int:
    return int(time.time() * 1000)


class CreativePipeline:
    """
    One blocking run per request. Collaborators are injected so the same flow
    runs against Firestore/Storage/Gemini in production and doubles in tests.
    """

    def __init__(self, store, image_host, gemini,
                 fetch: Callable[..., ImagePayload] = fetch_image,
                 clock: Callable[[], int] = _now_ms):
        self.store = store
        self.image_host = image_host
        self.gemini = gemini
        self.fetch = fetch
        self.clock = clock

    def run(self, ad: AdRequest, request_id: str) -> str:
        """
        Generate one product creative.

        Args:
            ad: Validated request
            request_id: Request ID for logging

        Returns:
            Public URL of the generated creative

        Raises:
            UserNotFoundError: no user with ad.user_email (no job created)
            CreativeError or any other exception: a step failed; the job
                record has already been deleted
        """
        log = get_request_logger('pipeline', request_id)
        start_time = time.time()

        user = self.store.find_one(USERS_COLLECTION, 'email', ad.user_email)
        if user is None:
            log.warning(f"Unknown user: {ad.user_email}")
            raise UserNotFoundError(ad.user_email)

        doc_id = self.create_job(ad, log)

        try:
            log.info("Step 1/4: Normalizing product image")
            product = self.normalize_product(ad, request_id)

            log.info("Step 2/4: Composing prompts")
            prompts = self.gemini.compose_prompts(product, ad.has_avatar, request_id=request_id)

            log.info("Step 3/4: Generating creative")
            avatar = self.fetch(ad.avatar, request_id=request_id) if ad.has_avatar else None
            image = self.gemini.generate_creative(prompts, product, avatar, request_id=request_id)

            log.info("Step 4/4: Publishing result")
            final_url = self.publish(doc_id, image, product, prompts, log)

        except Exception as e:
            log.error(f"Job {doc_id} failed ({type(e).__name__}): {str(e)}")
            self.discard_job(doc_id, log)
            raise

        log.info(f"Job {doc_id} complete in {time.time() - start_time:.1f}s - {final_url}")
        return final_url

    def create_job(self, ad: AdRequest, log) -> str:
        doc_id = str(self.clock())
        self.store.create(ADS_COLLECTION, doc_id, {
            'docId': doc_id,
            'userEmail': ad.user_email,
            'status': STATUS_PENDING,
            'description': ad.description,
            'size': ad.size,
            'createdAt': datetime.now(timezone.utc),
        })
        log.info(f"Created job {doc_id} for {ad.user_email}")
        return doc_id

    def normalize_product(self, ad: AdRequest, request_id: str = None) -> ImagePayload:
        """
        Uploaded bytes are used as-is and copied to the image host once;
        an existing URL is fetched and never re-uploaded.
        """
        if not ad.has_upload:
            return self.fetch(ad.image_url, request_id=request_id)

        payload = ImagePayload(data=ad.file_bytes, mime_type=ad.file_mime)
        data_url = f"data:{payload.mime_type};base64,{base64.b64encode(payload.data).decode('ascii')}"
        uploaded = self.image_host.upload(data_url, f'{self.clock()}.png')
        payload.url = uploaded.url
        return payload

    def publish(self, doc_id: str, image: InlineImage, product: ImagePayload,
                prompts: CreativePrompts, log) -> str:
        encoded = base64.b64encode(image.data).decode('ascii')
        uploaded = self.image_host.upload(
            f'data:{image.mime_type};base64,{encoded}',
            f'generate-{self.clock()}.png'
        )

        self.store.update(ADS_COLLECTION, doc_id, {
            'finalProductImageUrl': uploaded.url,
            'productImageUrl': product.url,
            'status': STATUS_COMPLETED,
            'imageToVideoPrompt': prompts.image_to_video,
            'completedAt': datetime.now(timezone.utc),
        })
        log.debug(f"Job {doc_id} marked completed")
        return uploaded.url

    def discard_job(self, doc_id: str, log) -> None:
        """Delete a failed job; a delete failure is logged, not raised."""
        try:
            self.store.delete(ADS_COLLECTION, doc_id)
            log.info(f"Deleted failed job {doc_id}")
        except Exception as e:
            log.error(f"Could not delete failed job {doc_id}: {str(e)}", exc_info=True)

    def get_job(self, doc_id: str) -> Optional[dict]:
        return self.store.get(ADS_COLLECTION, doc_id)
