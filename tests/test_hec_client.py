"""
Tests for the HTTP Event Collector client
"""

import json
import logging
from unittest.mock import patch

import httpx
import pytest

from banking_demo.config import BankingDemoConfig
from banking_demo.hec_client import BackgroundDelivery, HecClient, InlineDelivery


ENDPOINT = "https://collector.example.com:8088/services/collector/event"
TOKEN = "abcdef12-3456-7890-abcd-ef1234567890"


class RecordingTransport:
    """Callable for httpx.MockTransport that records each request"""

    def __init__(self, status_code=200, body=None, error=None):
        self.status_code = status_code
        self.body = body if body is not None else {"text": "Success", "code": 0}
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error(request)
        return httpx.Response(self.status_code, json=self.body)

    def payloads(self):
        return [json.loads(request.content) for request in self.requests]


def make_client(transport, endpoint=ENDPOINT, token=TOKEN, **kwargs):
    http = httpx.Client(transport=httpx.MockTransport(transport))
    return HecClient(endpoint=endpoint, token=token, client=http, delivery=InlineDelivery(), **kwargs)


class TestEnvelope:
    """Test envelope construction"""

    def setup_method(self):
        self.client = HecClient(
            ENDPOINT, TOKEN,
            source="banking-demo-app", sourcetype="banking:transaction",
            app="banking-demo", environment="demo", host="test-host",
        )

    def teardown_method(self):
        self.client.close()

    def test_envelope_shape(self):
        envelope = self.client.build_envelope(
            "BANKING_TRANSFER_SUCCESS",
            {"id": "john_doe", "name": "John Doe"},
            {"amount": "100.00", "correlationId": "corr-123"},
        )

        assert set(envelope) == {"time", "host", "source", "sourcetype", "event"}
        assert isinstance(envelope["time"], float)
        assert envelope["host"] == "test-host"
        assert envelope["source"] == "banking-demo-app"
        assert envelope["sourcetype"] == "banking:transaction"
        assert envelope["event"] == {
            "event_type": "BANKING_TRANSFER_SUCCESS",
            "user_id": "john_doe",
            "user_name": "John Doe",
            "data": {"amount": "100.00", "correlationId": "corr-123"},
            "app": "banking-demo",
            "environment": "demo",
            "correlation_id": "corr-123",
        }

    def test_correlation_id_generated_when_missing(self):
        first = self.client.build_envelope("BANKING_LOGOUT", {"id": "u"}, {})
        second = self.client.build_envelope("BANKING_LOGOUT", {"id": "u"}, {})

        assert len(first["event"]["correlation_id"]) == 32
        assert first["event"]["correlation_id"] != second["event"]["correlation_id"]

    def test_user_id_falls_back_to_username(self):
        envelope = self.client.build_envelope("BANKING_LOGIN_INITIATED", {"username": "jane_smith"})

        assert envelope["event"]["user_id"] == "jane_smith"
        assert envelope["event"]["user_name"] == "unknown"

    def test_missing_user(self):
        envelope = self.client.build_envelope("BANKING_APP_STARTUP")

        assert envelope["event"]["user_id"] == "unknown"
        assert envelope["event"]["user_name"] == "unknown"
        assert envelope["event"]["data"] == {}

    def test_debug_envelope(self):
        envelope = self.client.build_debug_envelope("CREDENTIAL_VALIDATION_PHASE_1")

        assert envelope["event"] == {
            "level": "DEBUG",
            "message": "CREDENTIAL_VALIDATION_PHASE_1",
            "app": "banking-demo",
            "environment": "demo",
        }


class TestDelivery:
    """Test POSTing envelopes to the collector"""

    def test_log_posts_envelope_with_auth_header(self):
        transport = RecordingTransport()
        client = make_client(transport)

        envelope = client.log("BANKING_LOGIN_SUCCESS", {"id": "john_doe", "name": "John Doe"},
                              {"correlationId": "c-1"})

        assert len(transport.requests) == 1
        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == ENDPOINT
        assert request.headers["Authorization"] == f"Splunk {TOKEN}"
        assert request.headers["Content-Type"] == "application/json"
        assert transport.payloads()[0]["event"] == envelope["event"]

    def test_custom_auth_scheme(self):
        transport = RecordingTransport()
        client = make_client(transport, auth_scheme="Bearer")

        client.log("BANKING_LOGOUT")

        assert transport.requests[0].headers["Authorization"] == f"Bearer {TOKEN}"

    def test_plain_http_endpoint(self):
        transport = RecordingTransport()
        client = make_client(transport, endpoint="http://localhost:8088/services/collector")

        assert client.scheme == "http"
        assert client.send(client.build_envelope("BANKING_LOGOUT")) is True
        assert transport.requests[0].url.scheme == "http"

    def test_send_success(self):
        client = make_client(RecordingTransport(status_code=200))

        assert client.send(client.build_envelope("BANKING_LOGOUT")) is True

    def test_non_2xx_is_logged_not_raised(self, capture_logger):
        logs = capture_logger("banking_demo.hec")
        transport = RecordingTransport(status_code=403, body={"text": "Invalid token", "code": 4})
        client = make_client(transport)

        assert client.send(client.build_envelope("BANKING_LOGOUT")) is False
        client.log("BANKING_LOGOUT")

        assert len(transport.requests) == 2
        assert any("status 403" in m for m in logs.messages)
        assert any("Invalid token" in m for m in logs.messages)

    def test_transport_error_is_logged_not_raised(self, capture_logger):
        logs = capture_logger("banking_demo.hec")

        def refuse(request):
            return httpx.ConnectError("connection refused", request=request)

        client = make_client(RecordingTransport(error=refuse))

        assert client.send(client.build_envelope("BANKING_LOGOUT")) is False
        assert client.log("BANKING_LOGOUT") is not None
        assert any("HEC request error" in m for m in logs.messages)

    def test_debug_is_forwarded(self):
        transport = RecordingTransport()
        client = make_client(transport)

        client.debug("REQUEST_VALIDATION_PHASE_1")

        assert transport.payloads()[0]["event"]["message"] == "REQUEST_VALIDATION_PHASE_1"

    def test_decimal_data_is_serialized(self):
        from decimal import Decimal

        transport = RecordingTransport()
        client = make_client(transport)

        client.log("BANKING_TRANSFER_SUCCESS", {"id": "john_doe"}, {"amount": Decimal("100.00")})

        assert transport.payloads()[0]["event"]["data"]["amount"] == "100.00"

    def test_background_delivery(self):
        transport = RecordingTransport()
        http = httpx.Client(transport=httpx.MockTransport(transport))
        client = HecClient(ENDPOINT, TOKEN, client=http, delivery=BackgroundDelivery(max_workers=1))

        for _ in range(3):
            client.log("BANKING_BALANCE_CHECK", {"id": "john_doe"})
        client.close()

        assert len(transport.requests) == 3

    def test_background_delivery_after_close_is_skipped(self):
        transport = RecordingTransport()
        http = httpx.Client(transport=httpx.MockTransport(transport))
        client = HecClient(ENDPOINT, TOKEN, client=http, delivery=BackgroundDelivery())
        client.close()

        assert client.log("BANKING_LOGOUT") is not None
        assert transport.requests == []


class TestUnconfigured:
    """Test console-only operation without endpoint or token"""

    @pytest.mark.parametrize("endpoint,token", [(None, TOKEN), (ENDPOINT, None), ("", "")])
    def test_no_network_call(self, endpoint, token):
        transport = RecordingTransport()
        client = make_client(transport, endpoint=endpoint, token=token)

        assert client.is_configured is False
        envelope = client.log("BANKING_LOGIN_SUCCESS", {"id": "john_doe"})

        assert envelope["event"]["event_type"] == "BANKING_LOGIN_SUCCESS"
        assert client.send(envelope) is False
        assert client.health_check() is False
        assert transport.requests == []

    def test_local_line_still_written(self, capture_logger):
        logs = capture_logger("banking_demo.hec")
        client = make_client(RecordingTransport(), endpoint=None, token=None)

        client.log("BANKING_TRANSFER_FAILED", {"id": "john_doe"}, {"reason": "INSUFFICIENT_FUNDS"})

        lines = [m for m in logs.messages if m.startswith("EVENT=")]
        assert len(lines) == 1
        assert "EVENT=BANKING_TRANSFER_FAILED" in lines[0]
        assert "INSUFFICIENT_FUNDS" in lines[0]

    def test_missing_settings_warn(self, capture_logger):
        logs = capture_logger("banking_demo.hec")

        make_client(RecordingTransport(), endpoint=None, token=None)

        assert any(r.levelno == logging.WARNING and "console only" in r.getMessage()
                   for r in logs.records)

    def test_unsupported_scheme_disables_delivery(self):
        transport = RecordingTransport()
        client = make_client(transport, endpoint="ftp://collector.example.com/event")

        client.log("BANKING_LOGOUT")

        assert client.is_configured is False
        assert transport.requests == []


class TestTls:
    """Test certificate verification settings"""

    def test_verification_enabled_by_default(self):
        with patch("banking_demo.hec_client.httpx.Client") as client_cls:
            client = HecClient(ENDPOINT, TOKEN)

        assert client.verify_tls is True
        client_cls.assert_called_once_with(timeout=5.0, verify=True)

    def test_verification_can_be_disabled(self, capture_logger):
        logs = capture_logger("banking_demo.hec")

        with patch("banking_demo.hec_client.httpx.Client") as client_cls:
            HecClient(ENDPOINT, TOKEN, verify_tls=False, timeout=2.0)

        client_cls.assert_called_once_with(timeout=2.0, verify=False)
        assert any("DISABLED" in m for m in logs.messages)


class TestHealthCheck:
    """Test the connection-test event"""

    def test_health_check_success(self):
        transport = RecordingTransport()
        client = make_client(transport, app="banking-demo")

        assert client.health_check() is True

        payload = transport.payloads()[0]
        assert payload["source"] == "banking-demo-test"
        assert payload["sourcetype"] == "_json"
        assert payload["event"]["test_type"] == "connection_verification"

    def test_health_check_failure(self):
        client = make_client(RecordingTransport(status_code=400))

        assert client.health_check() is False


class TestFromConfig:
    """Test building the client from settings"""

    def test_from_config(self):
        config = BankingDemoConfig(
            hec_endpoint=ENDPOINT,
            hec_token=TOKEN,
            hec_verify_tls=False,
            hec_async_delivery=False,
            app_name="demo-app",
            environment="test",
        )
        transport = RecordingTransport()
        http = httpx.Client(transport=httpx.MockTransport(transport))

        client = HecClient.from_config(config, client=http)

        assert isinstance(client.delivery, InlineDelivery)
        assert client.source == "banking-demo-app"
        assert client.sourcetype == "banking:transaction"
        assert client.verify_tls is False

        client.log("BANKING_LOGOUT")
        event = transport.payloads()[0]["event"]
        assert event["app"] == "demo-app"
        assert event["environment"] == "test"

    def test_async_delivery_by_default(self):
        config = BankingDemoConfig(hec_endpoint=ENDPOINT, hec_token=TOKEN)
        http = httpx.Client(transport=httpx.MockTransport(RecordingTransport()))

        client = HecClient.from_config(config, client=http)

        assert isinstance(client.delivery, BackgroundDelivery)
        client.close()

    def test_masked_token(self):
        client = make_client(RecordingTransport())

        assert client.masked_token() == "abcdef12..."
