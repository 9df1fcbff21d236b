"""Tests for config.py."""
import pytest

from config import Config, load_config
from oidc.errors import ConfigurationMissing


def test_load_config_reads_known_keys():
    config = load_config({
        "OIDC_CLIENT_ID": "rp-client",
        "SIGNING_KEY_ID": "K1",
        "ENVIRONMENT": "build",
        "UNRELATED": "ignored",
    })
    assert config.oidc_client_id == "rp-client"
    assert config.signing_key_id == "K1"
    assert config.environment == "build"
    assert "UNRELATED" not in config.data


def test_defaults():
    config = Config()
    assert config.audit_client_id == "vehicleOperatorLicense"
    assert config.nonce_table == "nonces"
    assert config.http_timeout == 5.0
    assert config.port == 8080
    assert config.audit_queue_url is None
    assert not config.has_supabase()


def test_empty_strings_are_unset():
    config = Config({"OIDC_CLIENT_ID": "", "SIGNING_KEY_ID": "K1"})
    assert config.missing("OIDC_CLIENT_ID", "SIGNING_KEY_ID") == ["OIDC_CLIENT_ID"]


def test_require_token_config_names_every_missing_key():
    with pytest.raises(ConfigurationMissing) as exc_info:
        Config({"SIGNING_KEY_ID": "K1"}).require_token_config()
    assert exc_info.value.keys == ["OIDC_CLIENT_ID", "ENVIRONMENT"]


def test_require_passes_when_set():
    Config({"OIDC_CLIENT_ID": "a", "SIGNING_KEY_ID": "b", "ENVIRONMENT": "c"}).require_token_config()


def test_typed_values():
    config = Config({"HTTP_TIMEOUT": "2.5", "PORT": "9000", "SUPABASE_URL": "https://x.supabase.co", "SUPABASE_KEY": "k"})
    assert config.http_timeout == 2.5
    assert config.port == 9000
    assert config.has_supabase()
