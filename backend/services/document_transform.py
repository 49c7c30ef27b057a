"""Recursive encrypt/decrypt of sensitive fields inside a JSON document.

The walk never mutates its input and never adds or drops keys: containers are
rebuilt with the same keys in the same order and the same list lengths.  Only
string values stored under a sensitive key change.  A sensitive key holding a
number, list or object is left as-is (lists and objects are still walked).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from crypto import DecryptStatus, FieldCipher
from models.document import Document, SensitiveFieldSet, TransformMode

logger = logging.getLogger(__name__)


@dataclass
class TransformReport:
    """Counts of sensitive leaves touched by one walk."""

    encrypted: int = 0
    decrypted: int = 0
    plaintext: int = 0
    corrupt: int = 0
    empty: int = 0


def _transform_leaf(
    value: str,
    mode: TransformMode,
    cipher: FieldCipher,
    report: TransformReport,
) -> str:
    if mode is TransformMode.ENCRYPT:
        if not value:
            report.empty += 1
            return value
        report.encrypted += 1
        return cipher.encrypt(value)

    outcome = cipher.try_decrypt(value)
    if outcome.status is DecryptStatus.DECRYPTED:
        report.decrypted += 1
    elif outcome.status is DecryptStatus.PLAINTEXT:
        report.plaintext += 1
    elif outcome.status is DecryptStatus.CORRUPT:
        report.corrupt += 1
    else:
        report.empty += 1
    return outcome.value


def _walk(
    doc: Document,
    mode: TransformMode,
    field_set: SensitiveFieldSet,
    cipher: FieldCipher,
    report: TransformReport,
) -> Document:
    if isinstance(doc, dict):
        result: dict[str, Document] = {}
        for key, value in doc.items():
            if key in field_set and isinstance(value, str):
                result[key] = _transform_leaf(value, mode, cipher, report)
            elif isinstance(value, (dict, list)):
                result[key] = _walk(value, mode, field_set, cipher, report)
            else:
                result[key] = value
        return result
    if isinstance(doc, list):
        return [_walk(item, mode, field_set, cipher, report) for item in doc]
    # str / int / float / bool / None
    return doc


def transform_with_report(
    doc: Document,
    mode: TransformMode,
    field_set: SensitiveFieldSet,
    cipher: FieldCipher,
) -> tuple[Document, TransformReport]:
    """Transform ``doc`` and return the new document with leaf counts."""
    report = TransformReport()
    return _walk(doc, TransformMode(mode), field_set, cipher, report), report


def transform_document(
    doc: Document,
    mode: TransformMode,
    field_set: SensitiveFieldSet,
    cipher: FieldCipher,
) -> Document:
    """Return a copy of ``doc`` with every sensitive string leaf en/decrypted."""
    transformed, _ = transform_with_report(doc, mode, field_set, cipher)
    return transformed


class DocumentTransformer:
    """Binds a cipher and a field set for repeated use across requests."""

    def __init__(self, cipher: FieldCipher, field_set: SensitiveFieldSet):
        self.cipher = cipher
        self.field_set = field_set

    def encrypt(self, doc: Document) -> Document:
        transformed, report = transform_with_report(
            doc, TransformMode.ENCRYPT, self.field_set, self.cipher
        )
        logger.debug("Encrypted %d sensitive field(s)", report.encrypted)
        return transformed

    def decrypt(self, doc: Document) -> Document:
        transformed, report = transform_with_report(
            doc, TransformMode.DECRYPT, self.field_set, self.cipher
        )
        if report.corrupt:
            logger.warning(
                "Passed through %d sensitive field(s) that could not be decrypted",
                report.corrupt,
            )
        if report.plaintext:
            logger.info("Read %d unencrypted legacy field(s)", report.plaintext)
        return transformed
