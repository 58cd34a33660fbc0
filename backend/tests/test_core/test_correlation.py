"""Tests for correlation ID generation and context management."""

import re

import pytest

from core.correlation import (
    correlation_id_var,
    generate_correlation_id,
    get_correlation_id,
    resolve_incoming_correlation_id,
    set_correlation_id,
)


class TestGenerateCorrelationId:
    """Tests for generate_correlation_id function."""

    def test_short_lowercase_hex(self) -> None:
        """Eight hex characters, short enough to read out over the phone."""
        assert re.match(r"^[0-9a-f]{8}$", generate_correlation_id())

    def test_generates_unique_ids(self) -> None:
        ids = {generate_correlation_id() for _ in range(1000)}
        assert len(ids) == 1000


class TestCorrelationIdContext:
    """Tests for correlation ID context management."""

    def test_set_and_get(self) -> None:
        set_correlation_id("abc12345")
        assert get_correlation_id() == "abc12345"

    def test_empty_when_not_set(self) -> None:
        correlation_id_var.set("")
        assert get_correlation_id() == ""


class TestResolveIncomingCorrelationId:
    """Tests for reusing a client-supplied ID."""

    @pytest.mark.parametrize("value", ["abc12345", "deploy-42", "A" * 64])
    def test_well_formed_id_is_reused(self, value: str) -> None:
        assert resolve_incoming_correlation_id(value) == value

    @pytest.mark.parametrize(
        "value",
        [None, "", "A" * 65, "has space", "line\nbreak", "{placeholder}", "semi;colon"],
    )
    def test_malformed_id_is_replaced(self, value) -> None:
        resolved = resolve_incoming_correlation_id(value)
        assert resolved != value
        assert re.match(r"^[0-9a-f]{8}$", resolved)


class TestCorrelationIdHeader:
    """Tests for the X-Correlation-ID response header."""

    def test_generated_when_absent(self, client) -> None:
        response = client.get("/api/health")
        assert re.match(r"^[0-9a-f]{8}$", response.headers["X-Correlation-ID"])

    def test_echoed_in_error_body(self, client) -> None:
        response = client.post(
            "/api/contact", content="{", headers={"X-Correlation-ID": "support-7"}
        )

        assert response.status_code == 400
        assert response.headers["X-Correlation-ID"] == "support-7"
        assert response.json()["correlation_id"] == "support-7"

    def test_injected_value_is_not_echoed(self, client) -> None:
        response = client.get(
            "/api/health", headers={"X-Correlation-ID": "evil value{}"}
        )
        assert response.headers["X-Correlation-ID"] != "evil value{}"
