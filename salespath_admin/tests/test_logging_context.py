"""Tests for structured logging and request_id propagation."""

import json
import logging

from salespath_admin.core.logging import JsonFormatter, PrettyFormatter, latency_bucket_ms, log_event


def test_request_id_in_response_and_logs(client, caplog):
    with caplog.at_level(logging.INFO, logger="salespath"):
        response = client.get("/healthz")
    rid = response.headers.get("x-request-id")
    assert rid
    records = [r for r in caplog.records if getattr(r, "request_id", None) == rid]
    assert records, "Expected logs to contain request_id from response"
    assert any(r.getMessage() == "request.complete" for r in records)


def test_request_id_in_error_response(client):
    response = client.get("/admin/businesses/missing")
    rid = response.headers.get("x-request-id")
    assert response.status_code == 403
    assert rid
    assert response.json()["request_id"] == rid


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/nope")
    assert response.status_code == 404
    body = response.json()
    assert body["type"] == "not_found"
    assert body["request_id"] == response.headers["x-request-id"]


def test_aggregation_logged_with_business_count(client, admin_headers, caplog):
    with caplog.at_level(logging.INFO, logger="salespath"):
        client.get("/admin/businesses/monitoring", headers=admin_headers)
    records = [r for r in caplog.records if r.getMessage() == "monitoring.aggregate"]
    assert records
    assert records[0].business_count == 0


def test_json_formatter_includes_structured_fields():
    record = logging.LogRecord("salespath", logging.INFO, __file__, 1, "monitoring.aggregate", None, None)
    record.request_id = "rid-1"
    record.business_count = 3
    record.latency_bucket = "<10ms"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "monitoring.aggregate"
    assert payload["request_id"] == "rid-1"
    assert payload["business_count"] == 3
    assert payload["latency_bucket"] == "<10ms"


def test_log_event_truncates_extra(caplog):
    with caplog.at_level(logging.INFO, logger="salespath"):
        log_event("info", "admin.test", actor_id="admin_key:abc", extra={"note": "x" * 600})
    record = next(r for r in caplog.records if r.getMessage() == "admin.test")
    assert record.actor_id == "admin_key:abc"
    assert record.note.endswith("...<truncated>")


def test_latency_buckets():
    assert latency_bucket_ms(None) == "unknown"
    assert latency_bucket_ms(5) == "<10ms"
    assert latency_bucket_ms(10) == "10-100ms"
    assert latency_bucket_ms(250) == "100-500ms"
    assert latency_bucket_ms(999.9) == "500-1000ms"
    assert latency_bucket_ms(1500) == ">=1000ms"


def test_pretty_formatter_line():
    record = logging.LogRecord("salespath.monitoring", logging.WARNING, __file__, 1, "slow %s", ("query",), None)
    record.request_id = "rid-2"

    line = PrettyFormatter().format(record)

    assert line.endswith("WARNING [salespath.monitoring] [rid=rid-2] slow query")
