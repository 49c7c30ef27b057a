"""Document shape and confidentiality configuration.

A ``Document`` is any JSON value.  The stored top-level value is a list of
registration records; each record may carry ``partyData`` with ``buyers`` and
``sellers`` lists whose entries hold the personal fields.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Union

from crypto import resolve_key

if TYPE_CHECKING:
    from config import Settings

Scalar = Union[str, int, float, bool, None]
Document = Union[dict[str, "Document"], list["Document"], Scalar]

SensitiveFieldSet = frozenset[str]


class TransformMode(str, enum.Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


class NameMaskPolicy(str, enum.Enum):
    """How party names are shown to callers without unmask rights.

    first_letter_reveal: "Arun Kumar" -> "A*********"
    alpha_preserving:    "12 Main St" -> "** Main St"
    """

    FIRST_LETTER_REVEAL = "first_letter_reveal"
    ALPHA_PRESERVING = "alpha_preserving"


# Field name -> encrypted at rest
DEFAULT_SENSITIVE_FIELDS: dict[str, bool] = {
    # Aadhaar number, split into three 4-digit blocks
    "aad1": True,
    "aad2": True,
    "aad3": True,
    # Phone numbers
    "ph1": True,
    "ph2": True,
    # Personal and relational names
    "name": True,
    "fatherName": True,
    "relationName": True,
    "guardianName": True,
    # Address components
    "address": True,
    "doorNo": True,
    "street": True,
    "village": True,
    "town": True,
    "district": True,
    "pincode": True,
    # Registration metadata is not personal
    "surveyNo": False,
    "docNo": False,
}


def sensitive_field_set(flags: Mapping[str, bool]) -> SensitiveFieldSet:
    return frozenset(name for name, sensitive in flags.items() if sensitive)


@dataclass(frozen=True)
class ConfidentialityConfig:
    """Immutable per-process confidentiality settings."""

    key: bytes
    sensitive_fields: SensitiveFieldSet
    name_mask_policy: NameMaskPolicy = NameMaskPolicy.FIRST_LETTER_REVEAL
    name_mask_max_length: int | None = None

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ConfidentialityConfig":
        """Build the config once at startup; raises ConfigurationError on a bad key."""
        return cls(
            key=resolve_key(settings.field_encryption_key),
            sensitive_fields=sensitive_field_set(settings.sensitive_fields),
            name_mask_policy=NameMaskPolicy(settings.name_mask_policy),
            name_mask_max_length=settings.name_mask_max_length,
        )
