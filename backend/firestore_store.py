"""
Firestore Document Store
Users lookup and job record create/update/delete for generated ads
"""
import os
from typing import Optional, Dict, Any

from dotenv import load_dotenv
from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

load_dotenv()

from errors import StoreError
from firebase_app import get_firebase_app
from logging_config import get_logger

logger = get_logger('store')

USERS_COLLECTION = os.getenv('USERS_COLLECTION', 'users')
ADS_COLLECTION = os.getenv('ADS_COLLECTION', 'user-ads')


class FirestoreStore:
    """
    Thin wrapper over a Firestore client.

    The client is created on first use so the app can start without
    credentials (health checks, tests with injected doubles).
    """

    def __init__(self, db=None):
        self._db = db

    @property
    def db(self):
        if self._db is None:
            self._db = firestore.client(app=get_firebase_app())
        return self._db

    def find_one(self, collection: str, field: str, value: Any) -> Optional[Dict[str, Any]]:
        """Return the first document where field == value, or None."""
        try:
            query = self.db.collection(collection).where(
                filter=FieldFilter(field, '==', value)
            ).limit(1)
            for doc in query.stream():
                return doc.to_dict()
            return None
        except Exception as e:
            logger.error(f"Query failed ({collection}.{field}): {e}")
            raise StoreError(f'Failed to query {collection}: {str(e)}')

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            doc = self.db.collection(collection).document(doc_id).get()
            return doc.to_dict() if doc.exists else None
        except Exception as e:
            logger.error(f"Get failed ({collection}/{doc_id}): {e}")
            raise StoreError(f'Failed to read {collection}/{doc_id}: {str(e)}')

    def create(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        try:
            self.db.collection(collection).document(doc_id).set(fields)
            logger.debug(f"Created {collection}/{doc_id}")
        except Exception as e:
            logger.error(f"Create failed ({collection}/{doc_id}): {e}")
            raise StoreError(f'Failed to create {collection}/{doc_id}: {str(e)}')

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        try:
            self.db.collection(collection).document(doc_id).update(fields)
            logger.debug(f"Updated {collection}/{doc_id}: {sorted(fields)}")
        except Exception as e:
            logger.error(f"Update failed ({collection}/{doc_id}): {e}")
            raise StoreError(f'Failed to update {collection}/{doc_id}: {str(e)}')

    def delete(self, collection: str, doc_id: str) -> None:
        try:
            self.db.collection(collection).document(doc_id).delete()
            logger.debug(f"Deleted {collection}/{doc_id}")
        except Exception as e:
            logger.error(f"Delete failed ({collection}/{doc_id}): {e}")
            raise StoreError(f'Failed to delete {collection}/{doc_id}: {str(e)}')
