"""Tests for the shared connector helpers."""

import pytest

import httpx

from membership_renewal.connectors import ConnectorError
from membership_renewal.connectors.base import check_response, decode_json
from membership_renewal.connectors.brevo import SUCCESS_CODES


class TestCheckResponse:
    """Tests for check_response."""

    def test_default_accepts_only_200(self):
        check_response("baserow", httpx.Response(200), "get members")

        with pytest.raises(ConnectorError) as exc_info:
            check_response("baserow", httpx.Response(201), "get members")
        assert exc_info.value.status_code == 201

    @pytest.mark.parametrize("status", [200, 201, 204, 302, 399])
    def test_range_accepts_codes_below_400(self, status):
        check_response("brevo", httpx.Response(status), "send email", ok=SUCCESS_CODES)

    @pytest.mark.parametrize("status", [400, 404, 500])
    def test_range_rejects_error_codes(self, status):
        with pytest.raises(ConnectorError) as exc_info:
            check_response("brevo", httpx.Response(status, text="bad"), "send email", ok=SUCCESS_CODES)

        assert exc_info.value.service == "brevo"
        assert exc_info.value.status_code == status
        assert "failed to send email: bad" in str(exc_info.value)


class TestDecodeJson:
    """Tests for decode_json."""

    def test_decodes_body(self):
        assert decode_json("baserow", httpx.Response(200, json={"a": 1}), "rows") == {"a": 1}

    def test_invalid_body_raises(self):
        with pytest.raises(ConnectorError):
            decode_json("baserow", httpx.Response(200, text="<html>"), "rows")
