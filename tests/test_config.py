"""Unit tests for fmdata_sdk.config: ConnectionConfig and environment loading."""

import dataclasses

import pytest

from fmdata_sdk import ConnectionConfig, FileMaker
from fmdata_sdk.connection import RequestsTransport
from fmdata_sdk.types import DapiVersion, HttpClientType

ENV_NAMES = (
    "SERVER_URL",
    "DATABASE",
    "USERNAME",
    "PASSWORD",
    "SSL_VERIFY",
    "FORCE_LEGACY_HTTP",
    "HTTP_CLIENT",
    "API_VERSION",
    "TIMEOUT",
    "RETURN_RAW_RESPONSE",
    "FORGET_CREDENTIALS_ON_LOGOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for prefix in ("FM_", "APP_"):
        for name in ENV_NAMES:
            monkeypatch.delenv(f"{prefix}{name}", raising=False)


class TestConnectionConfig:
    def test_defaults(self) -> None:
        config = ConnectionConfig(url="https://fms.example.com/fmi/data", database="Contacts")
        assert config.username is None
        assert config.ssl_verify is True
        assert config.force_legacy_http is False
        assert config.http_client is HttpClientType.HTTPX
        assert config.api_version is DapiVersion.V1
        assert config.timeout == 30.0
        assert config.forget_credentials_on_logout is True

    def test_frozen(self) -> None:
        config = ConnectionConfig(url="https://fms.example.com/fmi/data", database="Contacts")
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.database = "Other"  # type: ignore[misc]

    def test_password_not_in_repr(self) -> None:
        config = ConnectionConfig(url="u", database="d", username="admin", password="hunter2")
        assert "hunter2" not in repr(config)


class TestFromEnv:
    def test_minimal(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FM_SERVER_URL", "https://fms.example.com/fmi/data")
        monkeypatch.setenv("FM_DATABASE", "Contacts")
        config = ConnectionConfig.from_env(dotenv=False)
        assert config.url == "https://fms.example.com/fmi/data"
        assert config.database == "Contacts"
        assert config.username is None
        assert config.password is None

    def test_all_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        values = {
            "FM_SERVER_URL": "https://fms.example.com/fmi/data",
            "FM_DATABASE": "Contacts",
            "FM_USERNAME": "admin",
            "FM_PASSWORD": "secret",
            "FM_SSL_VERIFY": "false",
            "FM_FORCE_LEGACY_HTTP": "yes",
            "FM_HTTP_CLIENT": "Requests",
            "FM_API_VERSION": "vlatest",
            "FM_TIMEOUT": "12.5",
        }
        for name, value in values.items():
            monkeypatch.setenv(name, value)
        config = ConnectionConfig.from_env(dotenv=False)
        assert config.username == "admin"
        assert config.password == "secret"
        assert config.ssl_verify is False
        assert config.force_legacy_http is True
        assert config.http_client is HttpClientType.REQUESTS
        assert config.api_version is DapiVersion.VLATEST
        assert config.timeout == 12.5

    def test_session_flags(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FM_SERVER_URL", "https://fms.example.com/fmi/data")
        monkeypatch.setenv("FM_DATABASE", "Contacts")
        monkeypatch.setenv("FM_RETURN_RAW_RESPONSE", "true")
        monkeypatch.setenv("FM_FORGET_CREDENTIALS_ON_LOGOUT", "0")
        config = ConnectionConfig.from_env(dotenv=False)
        assert config.return_raw_response is True
        assert config.forget_credentials_on_logout is False

    def test_session_flag_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FM_SERVER_URL", "https://fms.example.com/fmi/data")
        monkeypatch.setenv("FM_DATABASE", "Contacts")
        config = ConnectionConfig.from_env(dotenv=False)
        assert config.return_raw_response is False
        assert config.forget_credentials_on_logout is True

    def test_custom_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_SERVER_URL", "https://other.example.com/fmi/data")
        monkeypatch.setenv("APP_DATABASE", "Inventory")
        config = ConnectionConfig.from_env(prefix="APP_", dotenv=False)
        assert config.database == "Inventory"

    def test_missing_required(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FM_SERVER_URL", "https://fms.example.com/fmi/data")
        with pytest.raises(ValueError, match="FM_DATABASE"):
            ConnectionConfig.from_env(dotenv=False)

    def test_invalid_client(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FM_SERVER_URL", "https://fms.example.com/fmi/data")
        monkeypatch.setenv("FM_DATABASE", "Contacts")
        monkeypatch.setenv("FM_HTTP_CLIENT", "curl")
        with pytest.raises(ValueError, match="Invalid HTTP client type"):
            ConnectionConfig.from_env(dotenv=False)


class TestFactory:
    def test_requests_session_without_login(self) -> None:
        api = FileMaker.requests("https://fms.example.com/fmi/data", "Contacts")
        assert isinstance(api.transport, RequestsTransport)
        assert not api.has_token
        api.close()
