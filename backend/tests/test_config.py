import pytest

from config import Settings, get_settings
from errors import ConfigurationError
from models.document import (
    DEFAULT_SENSITIVE_FIELDS,
    ConfidentialityConfig,
    NameMaskPolicy,
    sensitive_field_set,
)


def test_settings_defaults(monkeypatch):
    for key in ("DOCUMENT_STORE_URL", "NAME_MASK_POLICY", "SENSITIVE_FIELDS"):
        monkeypatch.delenv(key, raising=False)

    settings = get_settings()

    assert settings.document_store_url == "https://api.jsonbin.io/v3"
    assert settings.document_store_timeout_seconds is None
    assert settings.name_mask_policy is NameMaskPolicy.FIRST_LETTER_REVEAL
    assert settings.sensitive_fields == DEFAULT_SENSITIVE_FIELDS


def test_legacy_jsonbin_key_variable(monkeypatch):
    monkeypatch.delenv("DOCUMENT_STORE_MASTER_KEY", raising=False)
    monkeypatch.setenv("JSONBIN_KEY", "legacy-key")

    assert Settings().document_store_master_key == "legacy-key"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("NAME_MASK_POLICY", "alpha_preserving")
    monkeypatch.setenv("NAME_MASK_MAX_LENGTH", "5")
    monkeypatch.setenv("SENSITIVE_FIELDS", '{"ph1": true, "docNo": false}')
    monkeypatch.setenv("DOCUMENT_STORE_TIMEOUT_SECONDS", "2.5")

    settings = Settings()

    assert settings.name_mask_policy is NameMaskPolicy.ALPHA_PRESERVING
    assert settings.name_mask_max_length == 5
    assert settings.sensitive_fields == {"ph1": True, "docNo": False}
    assert settings.document_store_timeout_seconds == 2.5


def test_unknown_name_policy_rejected(monkeypatch):
    monkeypatch.setenv("NAME_MASK_POLICY", "hide_everything")
    with pytest.raises(ValueError):
        Settings()


def test_sensitive_field_set_keeps_flagged_names_only():
    fields = sensitive_field_set({"ph1": True, "docNo": False, "aad3": True})
    assert fields == frozenset({"ph1", "aad3"})


def test_default_field_set_covers_party_pii():
    fields = sensitive_field_set(DEFAULT_SENSITIVE_FIELDS)
    assert {"name", "ph1", "ph2", "aad1", "aad2", "aad3", "doorNo", "pincode"} <= fields
    assert "docNo" not in fields


def test_confidentiality_config_from_settings():
    settings = Settings(
        field_encryption_key="ab" * 32,
        sensitive_fields={"ph1": True},
        name_mask_policy="alpha_preserving",
    )
    config = ConfidentialityConfig.from_settings(settings)
    assert config.key == bytes([0xAB]) * 32
    assert config.sensitive_fields == frozenset({"ph1"})
    assert config.name_mask_policy is NameMaskPolicy.ALPHA_PRESERVING


@pytest.mark.parametrize("key", ["", "short", "a" * 40])
def test_confidentiality_config_rejects_bad_key(key):
    with pytest.raises(ConfigurationError):
        ConfidentialityConfig.from_settings(Settings(field_encryption_key=key))
