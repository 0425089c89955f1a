"""Tests for OTel span event emission helpers."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest

from verscope.config import get_config
from verscope.freeze import Diagnostic, FreezeReport, freeze
from verscope.otel import emit_freeze_diagnostic, emit_freeze_result, emit_projection
from verscope.projection.projector import project
from verscope.types import DiagnosticCode


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_span():
    """Create a mock OTel span that is recording."""
    span = MagicMock()
    span.is_recording.return_value = True
    return span


@pytest.fixture
def mock_otel(mock_span):
    """Patch OTel to return our mock span."""
    with patch("verscope._otel_helpers.HAS_OTEL", True), \
         patch("verscope._otel_helpers.otel_trace") as mock_trace:
        mock_trace.get_current_span.return_value = mock_span
        yield mock_span


def _diag() -> Diagnostic:
    return Diagnostic(
        code=DiagnosticCode.DANGLING_REFERENCE,
        message="'Api.X' references 'Api.Y' which is absent in version '1.0'",
        element_id="Api/X",
        target_id="Api/Y",
        version="1.0",
    )


# ---------------------------------------------------------------------------
# emit_freeze_result
# ---------------------------------------------------------------------------


class TestEmitFreezeResult:
    def test_passed(self, mock_otel):
        emit_freeze_result(FreezeReport(passed=True, elements_checked=5, versions_checked=2))
        call_args = mock_otel.add_event.call_args
        assert call_args.kwargs["name"] == "verscope.freeze.complete"
        attrs = call_args.kwargs["attributes"]
        assert attrs["verscope.passed"] is True
        assert attrs["verscope.elements_checked"] == 5
        assert attrs["verscope.diagnostic_count"] == 0

    def test_failed(self, mock_otel):
        emit_freeze_result(FreezeReport(passed=False, diagnostics=[_diag(), _diag()]))
        attrs = mock_otel.add_event.call_args.kwargs["attributes"]
        assert attrs["verscope.passed"] is False
        assert attrs["verscope.diagnostic_count"] == 2
        assert attrs["verscope.diagnostic_codes"] == "dangling_reference"

    def test_disabled_by_config(self, mock_otel):
        get_config(emit_span_events=False)
        emit_freeze_result(FreezeReport(passed=True))
        mock_otel.add_event.assert_not_called()


# ---------------------------------------------------------------------------
# emit_freeze_diagnostic
# ---------------------------------------------------------------------------


class TestEmitFreezeDiagnostic:
    def test_attributes(self, mock_otel):
        emit_freeze_diagnostic(_diag())
        call_args = mock_otel.add_event.call_args
        assert call_args.kwargs["name"] == "verscope.freeze.diagnostic"
        attrs = call_args.kwargs["attributes"]
        assert attrs["verscope.code"] == "dangling_reference"
        assert attrs["verscope.target_id"] == "Api/Y"
        assert attrs["verscope.version"] == "1.0"

    def test_no_target(self, mock_otel):
        emit_freeze_diagnostic(Diagnostic(code=DiagnosticCode.UNKNOWN_VERSION, message="m"))
        attrs = mock_otel.add_event.call_args.kwargs["attributes"]
        assert "verscope.target_id" not in attrs
        assert attrs["verscope.element_id"] == ""

    def test_logged_when_span_events_disabled(self, mock_otel, caplog):
        get_config(emit_span_events=False)
        with caplog.at_level(logging.WARNING, logger="verscope.otel"):
            emit_freeze_diagnostic(_diag())
        mock_otel.add_event.assert_not_called()
        assert "dangling_reference" in caplog.text


# ---------------------------------------------------------------------------
# emit_projection
# ---------------------------------------------------------------------------


class TestEmitProjection:
    def test_emitted_by_project(self, pet_store, mock_otel):
        bundle = freeze(pet_store.graph, pet_store.lifecycle, pet_store.registry)
        mock_otel.add_event.reset_mock()
        snapshot = project(bundle, "1.0")
        call_args = mock_otel.add_event.call_args
        assert call_args.kwargs["name"] == "verscope.projection.complete"
        attrs = call_args.kwargs["attributes"]
        assert attrs["verscope.version"] == "1.0"
        assert attrs["verscope.element_count"] == len(snapshot)

    def test_direct(self, pet_store, mock_otel):
        bundle = freeze(pet_store.graph, pet_store.lifecycle, pet_store.registry)
        snapshot = project(bundle, "2.0")
        mock_otel.add_event.reset_mock()
        emit_projection(snapshot)
        attrs = mock_otel.add_event.call_args.kwargs["attributes"]
        assert attrs["verscope.ordinal"] == 1
        assert attrs["verscope.reference_count"] == 3


class TestNoOtel:
    def test_noop_without_otel(self):
        with patch("verscope._otel_helpers.HAS_OTEL", False):
            # Should not raise
            emit_freeze_result(FreezeReport(passed=True))

    def test_noop_when_not_recording(self, mock_span):
        mock_span.is_recording.return_value = False
        with patch("verscope._otel_helpers.HAS_OTEL", True), \
             patch("verscope._otel_helpers.otel_trace") as mock_trace:
            mock_trace.get_current_span.return_value = mock_span
            emit_freeze_result(FreezeReport(passed=True))
        mock_span.add_event.assert_not_called()
