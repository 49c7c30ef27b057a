"""Display-time masking of party PII for callers without unmask rights.

Operates on decrypted records only:

    [{"partyData": {"buyers": [{"name": ..., "ph1": ..., "ph2": ...,
                                "aad1": ..., "aad2": ..., "aad3": ...}],
                    "sellers": [...]}}]

Everything outside the name, phone and Aadhaar keys of buyer/seller entries
is copied unchanged.  Values that are neither strings nor numbers mask to
``""``.  Masking is one-way and not idempotent: masking an already
masked value masks it again.
"""

from __future__ import annotations

from typing import Any

from models.document import Document, NameMaskPolicy

MASK_CHAR = "*"
PHONE_MASK = MASK_CHAR * 6
NATIONAL_ID_PREFIX = "XXXX XXXX "
NATIONAL_ID_BLOCK_MASK = "XXXX"
VISIBLE_TAIL = 4

PARTY_KEY = "partyData"
PARTY_ROLES = ("buyers", "sellers")
NAME_FIELD = "name"
PHONE_FIELDS = ("ph1", "ph2")
# aad1/aad2 are the leading Aadhaar blocks and are hidden completely;
# aad3 keeps its last four digits.
NATIONAL_ID_BLOCK_FIELDS = ("aad1", "aad2")
NATIONAL_ID_FIELD = "aad3"


def _as_text(value: Any) -> str:
    """Text to mask; containers and booleans mask to nothing."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def mask_phone(value: Any) -> str:
    """``"9876543210"`` -> ``"******3210"``."""
    text = _as_text(value)
    if not text:
        return ""
    return PHONE_MASK + text[-VISIBLE_TAIL:]


def mask_national_id(value: Any) -> str:
    """``"111122223333"`` -> ``"XXXX XXXX 3333"``."""
    text = _as_text(value)
    if not text:
        return ""
    return NATIONAL_ID_PREFIX + text[-VISIBLE_TAIL:]


def mask_national_id_block(value: Any) -> str:
    """``"1111"`` -> ``"XXXX"``; nothing of the block is shown."""
    return NATIONAL_ID_BLOCK_MASK if _as_text(value) else ""


def mask_name_first_letter(value: Any, max_mask: int | None = None) -> str:
    """Keep the first character, mask the rest (optionally capped)."""
    text = _as_text(value)
    if not text:
        return ""
    hidden = len(text) - 1
    if max_mask is not None:
        hidden = min(hidden, max_mask)
    return text[0] + MASK_CHAR * hidden


def mask_name_alpha_preserving(value: Any) -> str:
    """Mask digits only; letters, spaces and punctuation are kept."""
    text = _as_text(value)
    return "".join(MASK_CHAR if ch.isdigit() else ch for ch in text)


class RedactionView:
    """Builds the masked view of a decrypted record list."""

    def __init__(
        self,
        name_policy: NameMaskPolicy = NameMaskPolicy.FIRST_LETTER_REVEAL,
        name_mask_max_length: int | None = None,
    ):
        self.name_policy = NameMaskPolicy(name_policy)
        self.name_mask_max_length = name_mask_max_length

    def mask_name(self, value: Any) -> str:
        if self.name_policy is NameMaskPolicy.ALPHA_PRESERVING:
            return mask_name_alpha_preserving(value)
        return mask_name_first_letter(value, self.name_mask_max_length)

    def _redact_party(self, party: Any) -> Any:
        if not isinstance(party, dict):
            return party
        masked = dict(party)
        if NAME_FIELD in masked:
            masked[NAME_FIELD] = self.mask_name(masked[NAME_FIELD])
        for field in PHONE_FIELDS:
            if field in masked:
                masked[field] = mask_phone(masked[field])
        for field in NATIONAL_ID_BLOCK_FIELDS:
            if field in masked:
                masked[field] = mask_national_id_block(masked[field])
        if NATIONAL_ID_FIELD in masked:
            masked[NATIONAL_ID_FIELD] = mask_national_id(masked[NATIONAL_ID_FIELD])
        return masked

    def _redact_record(self, record: Any) -> Any:
        if not isinstance(record, dict):
            return record
        redacted = dict(record)
        party_data = record.get(PARTY_KEY)
        if PARTY_KEY not in record or not isinstance(party_data, dict):
            return redacted

        redacted_party_data = dict(party_data)
        for role in PARTY_ROLES:
            entries = party_data.get(role)
            if not isinstance(entries, list):
                entries = []
            redacted_party_data[role] = [self._redact_party(entry) for entry in entries]

        redacted[PARTY_KEY] = redacted_party_data
        return redacted

    def redact(self, records: Document) -> Document:
        """Return a masked copy of ``records``; non-lists are returned as-is."""
        if not isinstance(records, list):
            return records
        return [self._redact_record(record) for record in records]
