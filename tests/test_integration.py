"""
Integration tests against a live FileMaker Server.

These tests require a hosted database reachable through the Data API and an
account with the fmrest extended privilege. FM_LAYOUT must name a layout
with a text field called ``Name``.
Run with: pytest -m integration tests/test_integration.py
"""

from collections.abc import Generator

import pytest

from fmdata_sdk import DataAPI, HttpClientType, TokenExpired
from tests.conftest import FM_DATABASE, FM_LAYOUT, FM_PASSWORD, FM_SERVER_URL, FM_SSL_VERIFY, FM_USERNAME

pytestmark = pytest.mark.integration


@pytest.fixture(params=[HttpClientType.HTTPX, HttpClientType.REQUESTS], ids=["httpx", "requests"])
def live(request: pytest.FixtureRequest) -> Generator[DataAPI, None, None]:
    """A logged-in session, logged out on teardown."""
    with DataAPI(
        FM_SERVER_URL,
        FM_DATABASE,
        FM_USERNAME,
        FM_PASSWORD,
        ssl_verify=FM_SSL_VERIFY,
        http_client=request.param,
    ) as api:
        yield api


class TestLiveSession:
    def test_product_info(self, live: DataAPI) -> None:
        info = live.get_product_info()
        assert "version" in info

    def test_validate_session(self, live: DataAPI) -> None:
        assert live.validate_token_with_server() is True

    def test_layout_names(self, live: DataAPI) -> None:
        assert isinstance(live.get_layout_names(), list)


@pytest.mark.skipif(not FM_LAYOUT, reason="FM_LAYOUT not set")
class TestLiveRecords:
    def test_record_round_trip(self, live: DataAPI) -> None:
        record_id = live.create_record(FM_LAYOUT, {"Name": "fmdata-sdk integration"})
        try:
            mod_id = live.edit_record(FM_LAYOUT, record_id, {"Name": "fmdata-sdk integration edited"})
            assert mod_id is not None
            record = live.get_record(FM_LAYOUT, record_id)
            assert record["fieldData"]["Name"] == "fmdata-sdk integration edited"
        finally:
            live.delete_record(FM_LAYOUT, record_id)

    def test_find_without_match_is_empty(self, live: DataAPI) -> None:
        query = [{"fields": [{"fieldname": "Name", "fieldvalue": "==no such name 4f1c2a"}]}]
        result = live.find_records(FM_LAYOUT, query)
        assert not isinstance(result, TokenExpired)
        assert result == []
