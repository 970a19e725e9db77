from unittest.mock import Mock

from opentelemetry.sdk.trace.export import SpanExportResult

from fanout.telemetry import FilteringSpanExporter, parse_otlp_headers


def test_parse_otlp_headers():
    assert parse_otlp_headers("api-key=abc, x-team = core") == {
        "api-key": "abc",
        "x-team": "core",
    }
    assert parse_otlp_headers("") == {}
    assert parse_otlp_headers("garbage,=novalue") == {}


def test_filtering_exporter_drops_body_spans():
    inner = Mock()
    inner.export.return_value = SpanExportResult.SUCCESS
    body_span = Mock(attributes={"asgi.event.type": "http.response.body"})
    forward_span = Mock(attributes={"forward.target": "http://a"})

    result = FilteringSpanExporter(inner).export([body_span, forward_span])

    assert result == SpanExportResult.SUCCESS
    inner.export.assert_called_once_with([forward_span])


def test_filtering_exporter_skips_empty_batches():
    inner = Mock()
    body_span = Mock(attributes={"asgi.event.type": "http.response.body"})

    assert FilteringSpanExporter(inner).export([body_span]) == SpanExportResult.SUCCESS
    inner.export.assert_not_called()
