from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from models.document import DEFAULT_SENSITIVE_FIELDS, NameMaskPolicy


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Application
    app_name: str = "Land Registration Party Gateway"
    debug: bool = False

    # CORS — the registration front-end is served from a different origin
    cors_origins: list[str] = ["*"]

    # Document store (JSONBin-compatible API)
    document_store_url: str = "https://api.jsonbin.io/v3"
    document_store_bin_id: str = "6976c3a5d0ea881f40858480"
    document_store_master_key: str = Field(
        default="",
        validation_alias=AliasChoices("document_store_master_key", "jsonbin_key"),
    )
    # None disables the client timeout entirely
    document_store_timeout_seconds: float | None = None

    # Field-level encryption: 32 raw bytes, or 64 hex characters
    field_encryption_key: str = ""

    # Access tokens compared against the bearer credential
    read_token: str = ""
    write_token: str = ""

    # Redaction
    sensitive_fields: dict[str, bool] = Field(
        default_factory=lambda: dict(DEFAULT_SENSITIVE_FIELDS)
    )
    name_mask_policy: NameMaskPolicy = NameMaskPolicy.FIRST_LETTER_REVEAL
    name_mask_max_length: int | None = Field(default=None, ge=0)

    model_config = {
        "env_file": ("../.env", ".env"),
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()
