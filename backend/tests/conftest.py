"""
Shared pytest fixtures for Product Creative Generator tests.
"""
import os
import sys
import pytest
from io import BytesIO
from types import SimpleNamespace
from PIL import Image
from requests.structures import CaseInsensitiveDict

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from errors import StoreError, ImageHostError
from image_host import UploadResult, decode_upload


# ============ Test doubles ============

class FakeStore:
    """In-memory stand-in for FirestoreStore."""

    def __init__(self):
        self.collections = {}
        self.fail_on = set()
        self.calls = []

    def _check(self, op):
        self.calls.append(op)
        if op in self.fail_on:
            raise StoreError(f'{op} failed')

    def add_user(self, email):
        self.collections.setdefault('users', {})[email] = {'email': email, 'name': 'Test User'}

    def docs(self, collection):
        return self.collections.get(collection, {})

    def find_one(self, collection, field, value):
        self._check('find_one')
        for doc in self.docs(collection).values():
            if doc.get(field) == value:
                return dict(doc)
        return None

    def get(self, collection, doc_id):
        self._check('get')
        doc = self.docs(collection).get(doc_id)
        return dict(doc) if doc is not None else None

    def create(self, collection, doc_id, fields):
        self._check('create')
        self.collections.setdefault(collection, {})[doc_id] = dict(fields)

    def update(self, collection, doc_id, fields):
        self._check('update')
        if doc_id not in self.docs(collection):
            raise StoreError(f'No document {collection}/{doc_id}')
        self.collections[collection][doc_id].update(fields)

    def delete(self, collection, doc_id):
        self._check('delete')
        self.docs(collection).pop(doc_id, None)


class FakeImageHost:
    """Records uploads and hands back predictable URLs."""

    def __init__(self):
        self.uploads = []
        self.fail = False

    def upload(self, data, file_name):
        if self.fail:
            raise ImageHostError('upload failed')
        raw, content_type = decode_upload(data, file_name)
        self.uploads.append({'file_name': file_name, 'data': raw, 'content_type': content_type})
        return UploadResult(url=f'https://cdn.test/{file_name}', path=file_name)


class FakeModels:
    def __init__(self):
        self.responses = []
        self.calls = []

    def generate_content(self, model, contents, config=None):
        self.calls.append({'model': model, 'contents': contents, 'config': config})
        if not self.responses:
            raise RuntimeError('No fake response queued')
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeGeminiClient:
    """Mimics genai.Client: client.models.generate_content(...)"""

    def __init__(self):
        self.models = FakeModels()

    def queue(self, *responses):
        self.models.responses.extend(responses)


def text_response(text):
    return SimpleNamespace(text=text, candidates=[])


def image_response(data=b'\x89PNG generated image bytes', mime_type='image/png'):
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)
    return SimpleNamespace(text=None, candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def no_image_response(text='I cannot render that.'):
    part = SimpleNamespace(inline_data=None, text=text)
    return SimpleNamespace(text=text, candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


class FakeHttpResponse:
    def __init__(self, content=b'', status_code=200, headers=None):
        self.content = content
        self.status_code = status_code
        self.headers = CaseInsensitiveDict(headers or {})


PROMPTS_JSON = '{"textToImage": "A soda can bursting through orange splashes", "imageToVideo": "Slow zoom as splashes swirl"}'


# ============ Fixtures ============

@pytest.fixture
def fake_store():
    store = FakeStore()
    store.add_user('owner@example.com')
    return store


@pytest.fixture
def fake_host():
    return FakeImageHost()


@pytest.fixture
def gemini_client():
    return FakeGeminiClient()


@pytest.fixture
def gemini(gemini_client):
    from gemini_service import GeminiService
    return GeminiService(client=gemini_client, prompt_model='prompt-model', image_model='image-model')


@pytest.fixture
def app(fake_store, fake_host, gemini):
    """Create Flask application wired to test doubles."""
    from app import create_app
    flask_app = create_app(store=fake_store, image_host=fake_host, gemini=gemini)
    flask_app.config['TESTING'] = True
    yield flask_app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()


@pytest.fixture
def sample_png_bytes():
    """PNG bytes of a small generated image."""
    img = Image.new('RGB', (64, 64), color='blue')
    buf = BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()


@pytest.fixture
def sample_jpeg_bytes():
    img = Image.new('RGB', (64, 64), color='red')
    buf = BytesIO()
    img.save(buf, format='JPEG')
    return buf.getvalue()


@pytest.fixture
def http_get(monkeypatch, sample_jpeg_bytes):
    """
    Stub requests.get used by image_fetcher.

    Maps URL -> FakeHttpResponse; unknown URLs return a valid JPEG.
    """
    routes = {}
    requested = []

    def fake_get(url, **kwargs):
        requested.append(url)
        if url in routes:
            response = routes[url]
            if isinstance(response, Exception):
                raise response
            return response
        return FakeHttpResponse(sample_jpeg_bytes, headers={'Content-Type': 'image/jpeg'})

    monkeypatch.setattr('image_fetcher.requests.get', fake_get)
    return SimpleNamespace(routes=routes, requested=requested)
