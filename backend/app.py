"""
Product Creative Generator - Flask Backend
"""
import os
from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

# Import logging (must be after dotenv for LOG_DIR/LOG_LEVEL env vars)
from logging_config import setup_logging, get_logger

# Initialize logging
setup_logging()
logger = get_logger('app')

from creative_routes import creative_bp
from firestore_store import FirestoreStore
from gemini_service import GeminiService
from image_host import StorageImageHost
from pipeline import CreativePipeline


def create_app(store=None, image_host=None, gemini=None) -> Flask:
    """
    Build the Flask app and wire the pipeline.

    Collaborators default to Firestore, Firebase Storage and Gemini; all
    three connect lazily on first use.
    """
    app = Flask(__name__)
    CORS(app, origins=os.getenv('CORS_ORIGINS', '*').split(','))

    app.config['MAX_CONTENT_LENGTH'] = 20 * 1024 * 1024  # 20MB max upload

    app.extensions['creative_pipeline'] = CreativePipeline(
        store=store if store is not None else FirestoreStore(),
        image_host=image_host if image_host is not None else StorageImageHost(),
        gemini=gemini if gemini is not None else GeminiService(),
    )

    app.register_blueprint(creative_bp)
    return app


app = create_app()


if __name__ == '__main__':
    port = int(os.getenv('PORT', 5001))
    logger.info(f"Starting Flask server on port {port}")
    app.run(debug=False, host='0.0.0.0', port=port)
