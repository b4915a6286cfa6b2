"""
Tests for structured logging and the request id middleware.
"""
import json
import logging

from app.logging_config import REDACTED, StructuredFormatter, get_logger, redact, request_id_var


class TestRedaction:

    def test_secret_keys_are_masked(self):
        masked = redact({"user_id": 4, "access_token": "EAAB...", "password": "hunter2", "token": None})
        assert masked == {"user_id": 4, "access_token": REDACTED, "password": REDACTED, "token": None}

    def test_formatter_includes_request_id(self):
        record = logging.LogRecord("ignyt.test", logging.INFO, __file__, 1, "hello", None, None)
        record.context = {"brand_id": 3}
        record.logger_name = "ignyt.test"
        record.request_id = "req_abc"
        data = json.loads(StructuredFormatter().format(record))
        assert data["message"] == "hello"
        assert data["request_id"] == "req_abc"
        assert data["brand_id"] == 3

    def test_loggers_are_shared(self):
        assert get_logger("evergreen") is get_logger("evergreen")

    def test_no_request_id_outside_requests(self):
        assert request_id_var.get() is None


class TestRequestContext:

    def test_response_carries_request_id(self, client):
        response = client.get("/api/health/live")
        assert response.headers["X-Request-ID"].startswith("req_")
        assert response.headers["Cache-Control"] == "no-store"
        assert response.headers["X-Frame-Options"] == "DENY"
