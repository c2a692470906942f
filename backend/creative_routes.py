"""
Creative API Routes

Endpoints for generating product creatives and reading job records.
"""
import uuid

from flask import Blueprint, request, jsonify, current_app

from ad_request import parse_ad_request
from errors import MissingFieldError, UserNotFoundError, StoreError
from logging_config import get_logger, get_request_logger

logger = get_logger('routes')

creative_bp = Blueprint('creative', __name__, url_prefix='/api')

# Failures are collapsed into one message with a 200 status, as existing clients expect
GENERIC_ERROR = {'error': 'Please Try Again'}


def _pipeline():
    return current_app.extensions['creative_pipeline']


@creative_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({'status': 'ok', 'message': 'Product Creative Generator API is running'})


@creative_bp.route('/generate-product-image', methods=['POST'])
def generate_product_image():
    """
    Generate a marketing creative for an uploaded or linked product image.

    Form fields: file | imageUrl, userEmail, description, size, avatar.
    Returns the public URL of the generated image as a JSON string.
    """
    request_id = str(uuid.uuid4())[:8]
    log = get_request_logger('routes', request_id)

    try:
        ad = parse_ad_request(request.form, request.files)
    except MissingFieldError as e:
        log.warning(f"Validation failed: {str(e)}")
        return jsonify({'error': str(e)}), 400

    log.info(f"New request: user={ad.user_email}, "
             f"source={'upload' if ad.has_upload else 'url'}, avatar={ad.has_avatar}")

    try:
        final_url = _pipeline().run(ad, request_id)
    except UserNotFoundError as e:
        log.warning(str(e))
        return jsonify({'error': 'User not found'}), 404
    except Exception as e:
        log.error(f"Generation failed ({type(e).__name__}): {str(e)}")
        return jsonify(GENERIC_ERROR)

    return jsonify(final_url)


@creative_bp.route('/ads/<doc_id>', methods=['GET'])
def get_ad(doc_id):
    """Get a single job record"""
    try:
        job = _pipeline().get_job(doc_id)
    except StoreError as e:
        logger.error(f"Failed to get job {doc_id}: {e}")
        return jsonify({'error': str(e)}), 500

    if job is None:
        return jsonify({'error': 'Job not found'}), 404
    return jsonify(job)
