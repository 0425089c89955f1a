"""
OTel span event emission helpers for freeze and projection.

All functions go through ``add_span_event()`` so they degrade gracefully
when OTel is not installed, and are skipped entirely when
``emit_span_events`` is disabled in the configuration.

Usage::

    from verscope.otel import emit_freeze_result, emit_projection

    emit_freeze_result(report)
    emit_projection(snapshot)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from verscope._otel_helpers import add_span_event
from verscope.config import get_config

if TYPE_CHECKING:  # pragma: no cover
    from verscope.freeze import Diagnostic, FreezeReport
    from verscope.projection.snapshot import Snapshot

logger = logging.getLogger(__name__)


def _enabled() -> bool:
    return get_config().emit_span_events


def emit_freeze_result(report: "FreezeReport") -> None:
    """Emit a span event for a freeze pass result.

    Event name: ``verscope.freeze.complete``
    """
    if not _enabled():
        return
    attrs: dict[str, str | int | float | bool] = {
        "verscope.passed": report.passed,
        "verscope.elements_checked": report.elements_checked,
        "verscope.versions_checked": report.versions_checked,
        "verscope.diagnostic_count": len(report.diagnostics),
        "verscope.diagnostic_codes": ",".join(sorted(c.value for c in report.codes)),
    }

    if report.passed:
        logger.debug(
            "Freeze check passed: elements=%d versions=%d",
            report.elements_checked,
            report.versions_checked,
        )
    else:
        logger.debug(
            "Freeze check FAILED: diagnostics=%d",
            len(report.diagnostics),
        )

    add_span_event("verscope.freeze.complete", attrs)


def emit_freeze_diagnostic(diagnostic: "Diagnostic") -> None:
    """Emit a span event for a single freeze diagnostic.

    Event name: ``verscope.freeze.diagnostic``
    """
    logger.warning("Freeze diagnostic [%s]: %s", diagnostic.code.value, diagnostic.message)

    if not _enabled():
        return
    attrs: dict[str, str | int | float | bool] = {
        "verscope.code": diagnostic.code.value,
        "verscope.element_id": diagnostic.element_id or "",
        "verscope.version": diagnostic.version or "",
        "verscope.message": diagnostic.message,
    }
    if diagnostic.target_id is not None:
        attrs["verscope.target_id"] = diagnostic.target_id

    add_span_event("verscope.freeze.diagnostic", attrs)


def emit_projection(snapshot: "Snapshot") -> None:
    """Emit a span event for a completed projection.

    Event name: ``verscope.projection.complete``
    """
    if not _enabled():
        return
    attrs: dict[str, str | int | float | bool] = {
        "verscope.version": snapshot.version,
        "verscope.ordinal": snapshot.ordinal,
        "verscope.element_count": len(snapshot),
        "verscope.reference_count": snapshot.reference_count,
    }

    logger.debug(
        "Projected version %s: %d element(s)", snapshot.version, len(snapshot)
    )

    add_span_event("verscope.projection.complete", attrs)
