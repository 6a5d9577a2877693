"""Tests for request ID tracing middleware."""
import json
import logging

import pytest

from src.logging_config import JSONFormatter, RequestIDFilter
from src.middleware.request_id import request_id_var


@pytest.mark.asyncio
async def test_response_includes_request_id(client):
    """Every response should have X-Request-ID header."""
    resp = await client.get("/health")
    assert "x-request-id" in resp.headers
    rid = resp.headers["x-request-id"]
    assert len(rid) == 36  # UUID format


@pytest.mark.asyncio
async def test_client_request_id_honored(client):
    """If client sends X-Request-ID, server should echo it back."""
    custom_id = "my-trace-12345"
    resp = await client.get("/health", headers={"X-Request-ID": custom_id})
    assert resp.headers["x-request-id"] == custom_id


@pytest.mark.asyncio
async def test_error_responses_carry_request_id(client):
    resp = await client.get("/api/v1/admin/video-abuses", headers={"X-Request-ID": "trace-403"})
    assert resp.status_code == 403
    assert resp.headers["x-request-id"] == "trace-403"


@pytest.mark.asyncio
async def test_unique_ids_per_request(client):
    """Each request gets a unique ID."""
    r1 = await client.get("/health")
    r2 = await client.get("/health")
    assert r1.headers["x-request-id"] != r2.headers["x-request-id"]


def _record(message="hello"):
    return logging.LogRecord("src.test", logging.INFO, __file__, 1, message, None, None)


def test_filter_tags_records_with_current_request_id():
    record = _record()
    token = request_id_var.set("abc-123")
    try:
        RequestIDFilter().filter(record)
    finally:
        request_id_var.reset(token)
    assert record.request_id == "abc-123"


def test_filter_outside_a_request():
    record = _record()
    RequestIDFilter().filter(record)
    assert record.request_id == "-"


def test_json_formatter_includes_request_id():
    record = _record("listed 3 abuses")
    record.request_id = "abc-123"
    line = json.loads(JSONFormatter().format(record))
    assert line["message"] == "listed 3 abuses"
    assert line["level"] == "INFO"
    assert line["request_id"] == "abc-123"
