"""
Firebase Admin initialization shared by the Firestore store and the image host.
"""
import os
import threading

import firebase_admin
from firebase_admin import credentials
from dotenv import load_dotenv

load_dotenv()

from logging_config import get_logger

logger = get_logger('firebase')

_init_lock = threading.Lock()


def get_firebase_app() -> firebase_admin.App:
    """
    Initialize the default Firebase app once per process and return it.

    Uses FIREBASE_CREDENTIALS_PATH when set, otherwise Application Default
    Credentials. FIREBASE_STORAGE_BUCKET becomes the default bucket.
    """
    with _init_lock:
        if firebase_admin._apps:
            return firebase_admin.get_app()

        cred_path = os.getenv('FIREBASE_CREDENTIALS_PATH')
        if cred_path:
            if not os.path.exists(cred_path):
                raise FileNotFoundError(f'Firebase credentials file not found: {cred_path}')
            cred = credentials.Certificate(cred_path)
        else:
            cred = credentials.ApplicationDefault()

        options = {}
        bucket = os.getenv('FIREBASE_STORAGE_BUCKET')
        if bucket:
            options['storageBucket'] = bucket

        app = firebase_admin.initialize_app(cred, options)
        logger.info(f"Firebase initialized: bucket={bucket or 'none'}")
        return app
