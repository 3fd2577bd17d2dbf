"""Unit tests for fmdata_sdk.types: enums and result values."""

import pytest

from fmdata_sdk.types import (
    FILEMAKER_API_TOKEN_EXPIRED,
    FILEMAKER_NO_RECORDS,
    TOKEN_LIFETIME_SECONDS,
    DapiVersion,
    DateFormat,
    HttpClientType,
    Outcome,
    ScriptType,
    TokenExpired,
)


class TestHttpClientType:
    def test_values(self) -> None:
        assert HttpClientType.HTTPX.value == "httpx"
        assert HttpClientType.REQUESTS.value == "requests"

    @pytest.mark.parametrize("raw", ["httpx", "HTTPX", "HtTpX", " httpx "])
    def test_from_string_httpx(self, raw: str) -> None:
        assert HttpClientType.from_string(raw) is HttpClientType.HTTPX

    @pytest.mark.parametrize("raw", ["requests", "REQUESTS", "ReQuEsTs"])
    def test_from_string_requests(self, raw: str) -> None:
        assert HttpClientType.from_string(raw) is HttpClientType.REQUESTS

    @pytest.mark.parametrize("raw", ["curl", "", "123"])
    def test_from_string_invalid(self, raw: str) -> None:
        with pytest.raises(ValueError, match="Invalid HTTP client type"):
            HttpClientType.from_string(raw)


class TestDapiVersion:
    def test_values(self) -> None:
        assert DapiVersion.V1.value == "v1"
        assert DapiVersion.V2.value == "v2"
        assert DapiVersion.VLATEST.value == "vLatest"

    def test_from_string_case_insensitive(self) -> None:
        assert DapiVersion.from_string("V1") is DapiVersion.V1
        assert DapiVersion.from_string("v2") is DapiVersion.V2
        assert DapiVersion.from_string("VLATEST") is DapiVersion.VLATEST
        assert DapiVersion.from_string("vLatest") is DapiVersion.VLATEST

    def test_from_string_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid API version"):
            DapiVersion.from_string("v3")


class TestConstants:
    def test_codes(self) -> None:
        assert FILEMAKER_NO_RECORDS == 401
        assert FILEMAKER_API_TOKEN_EXPIRED == 952

    def test_script_types(self) -> None:
        assert ScriptType.PREREQUEST.value == "prerequest"
        assert ScriptType.PRESORT.value == "presort"
        assert ScriptType.POSTREQUEST.value == "postrequest"

    def test_date_formats(self) -> None:
        assert DateFormat.DEFAULT == 0
        assert DateFormat.FILE_LOCALE == 1
        assert DateFormat.ISO8601 == 2

    def test_token_lifetime_is_fourteen_minutes(self) -> None:
        assert TOKEN_LIFETIME_SECONDS == 840


class TestOutcome:
    def test_success_with_falsy_value_is_ok(self) -> None:
        outcome = Outcome.success("0")
        assert outcome.ok is True
        assert bool(outcome) is True
        assert outcome.value == "0"

    def test_failure(self) -> None:
        outcome: Outcome[str] = Outcome.failure("nope")
        assert outcome.ok is False
        assert not outcome
        assert outcome.reason == "nope"
        assert outcome.value is None


class TestTokenExpired:
    def test_defaults(self) -> None:
        signal = TokenExpired()
        assert signal.code == 952
        assert signal.raw == {}

    def test_is_falsy(self) -> None:
        assert not TokenExpired()
