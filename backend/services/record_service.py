"""Write and read paths for the registration records.

write: caller document -> encrypt sensitive fields -> store.replace
read:  store.fetch_latest -> decrypt -> raw (unmask) or redacted view
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import Depends

from config import get_settings
from crypto import FieldCipher
from models.document import ConfidentialityConfig, Document
from services.document_store import DocumentStoreClient, get_document_store
from services.document_transform import DocumentTransformer
from services.redaction import RedactionView

logger = logging.getLogger(__name__)


class RecordService:
    def __init__(self, config: ConfidentialityConfig, store: DocumentStoreClient):
        self.config = config
        self.store = store
        self.transformer = DocumentTransformer(FieldCipher(config.key), config.sensitive_fields)
        self.redaction = RedactionView(config.name_mask_policy, config.name_mask_max_length)

    async def write(self, document: Document) -> dict[str, Any]:
        """Encrypt ``document`` and replace the stored copy with it."""
        encrypted = self.transformer.encrypt(document)
        metadata = await self.store.replace(encrypted)
        logger.info("Stored records document")
        return metadata

    async def read(self, unmask: bool = False) -> Document:
        """Fetch and decrypt the stored records; masked unless ``unmask``."""
        stored = await self.store.fetch_latest()
        decrypted = self.transformer.decrypt(stored)
        if unmask:
            return decrypted
        return self.redaction.redact(decrypted)


@lru_cache
def get_confidentiality_config() -> ConfidentialityConfig:
    """Process-wide confidentiality config; raises ConfigurationError if invalid."""
    return ConfidentialityConfig.from_settings(get_settings())


def get_record_service(
    store: DocumentStoreClient = Depends(get_document_store),
) -> RecordService:
    """FastAPI dependency wiring the record service for one request."""
    return RecordService(get_confidentiality_config(), store)
