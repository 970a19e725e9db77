import pytest

from fanout.forwarder.headers import (
    FORWARDED_IP_HEADER,
    REVERSE_PROXY_HEADERS,
    filter_headers,
    parse_allowlist,
)


class TestParseAllowlist:
    def test_empty_means_no_allowlist(self):
        assert parse_allowlist("") is None
        assert parse_allowlist(None) is None
        assert parse_allowlist(" , ") is None

    def test_names_lowercased_and_trimmed(self):
        assert parse_allowlist("X-Api-Key, Authorization") == frozenset(
            {"x-api-key", "authorization"}
        )


class TestFilterHeaders:
    """Outbound header derivation."""

    @pytest.mark.parametrize("allowlist", [None, frozenset({"host", "x-scheme", "x-forwarded-for", "x-forwarded-proto", "accept"})])
    def test_reverse_proxy_headers_never_forwarded(self, allowlist):
        inbound = [
            ("Host", "proxy.example.com"),
            ("X-Scheme", "https"),
            ("X-Forwarded-For", "10.0.0.1"),
            ("x-forwarded-proto", "https"),
            ("Accept", "*/*"),
        ]

        result = filter_headers(inbound, allowlist)

        names = {name.lower() for name, _ in result}
        assert not names & REVERSE_PROXY_HEADERS
        assert ("Accept", "*/*") in result

    def test_allowlist_keeps_only_listed_names(self):
        inbound = [("X-Api-Key", "k"), ("X-Other", "v")]

        result = filter_headers(inbound, frozenset({"x-api-key"}))

        assert dict(result) == {"X-Api-Key": "k"}

    def test_original_casing_preserved(self):
        result = filter_headers([("X-Custom-Header", "1")])
        assert result[0][0] == "X-Custom-Header"

    def test_real_ip_injected_without_allowlist(self):
        inbound = [("X-Real-IP", "203.0.113.7"), ("Accept", "*/*")]

        result = dict(filter_headers(inbound))

        assert result[FORWARDED_IP_HEADER] == "203.0.113.7"
        # x-real-ip itself is not a reverse-proxy artifact and is passed on
        assert result["X-Real-IP"] == "203.0.113.7"

    def test_real_ip_not_injected_with_allowlist(self):
        inbound = [("x-real-ip", "203.0.113.7"), ("x-api-key", "k")]

        result = dict(filter_headers(inbound, frozenset({"x-api-key"})))

        assert result == {"x-api-key": "k"}

    def test_injected_ip_replaces_inbound_value(self):
        inbound = [("x-fwd-from-ip", "spoofed"), ("x-real-ip", "198.51.100.1")]

        result = filter_headers(inbound)

        assert [v for n, v in result if n == FORWARDED_IP_HEADER] == ["198.51.100.1"]

    def test_no_real_ip_no_injection(self):
        result = dict(filter_headers([("Accept", "*/*")]))
        assert FORWARDED_IP_HEADER not in result

    def test_repeated_headers_kept(self):
        inbound = [("Cookie", "a=1"), ("Cookie", "b=2")]
        assert filter_headers(inbound) == inbound

    def test_empty_input(self):
        assert filter_headers([]) == []
        assert filter_headers([], frozenset({"x-api-key"})) == []
