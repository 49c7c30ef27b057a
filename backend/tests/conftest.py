import copy
import os

# Configure the process before the app modules read settings
TEST_KEY_HEX = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
READ_TOKEN = "test-read-token"
WRITE_TOKEN = "test-write-token"

os.environ["FIELD_ENCRYPTION_KEY"] = TEST_KEY_HEX
os.environ["JSONBIN_KEY"] = "test-master-key"
os.environ["READ_TOKEN"] = READ_TOKEN
os.environ["WRITE_TOKEN"] = WRITE_TOKEN
os.environ.pop("NAME_MASK_POLICY", None)
os.environ.pop("NAME_MASK_MAX_LENGTH", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from config import get_settings  # noqa: E402
from crypto import FieldCipher  # noqa: E402
from errors import UpstreamError  # noqa: E402
from services.record_service import get_confidentiality_config  # noqa: E402


class FakeDocumentStore:
    """In-memory stand-in for the document store client."""

    def __init__(self, record=None, fail: bool = False):
        self.record = copy.deepcopy(record)
        self.fail = fail
        self.replace_calls = 0
        self.fetch_calls = 0

    async def fetch_latest(self):
        self.fetch_calls += 1
        if self.fail:
            raise UpstreamError("Document store returned an error", status_code=503)
        return copy.deepcopy(self.record)

    async def replace(self, document):
        self.replace_calls += 1
        if self.fail:
            raise UpstreamError("Document store returned an error", status_code=503)
        self.record = copy.deepcopy(document)
        return {"parentId": "bin-1", "private": True}


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    get_settings.cache_clear()
    get_confidentiality_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_confidentiality_config.cache_clear()


@pytest.fixture()
def cipher():
    return FieldCipher(TEST_KEY_HEX)


@pytest.fixture()
def store():
    return FakeDocumentStore()


@pytest.fixture()
def client(store):
    from main import app
    from services.document_store import get_document_store

    app.dependency_overrides[get_document_store] = lambda: store
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def read_headers():
    return {"Authorization": f"Bearer {READ_TOKEN}"}


@pytest.fixture()
def write_headers():
    return {"Authorization": f"Bearer {WRITE_TOKEN}"}
