# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Outcome ledger and report rendering tests.
"""

import io

import pytest

from streamvault.outcome import OutcomeKind, OutcomeLedger, OutcomeRecord
from streamvault.report import format_count, format_size, render_ledger


@pytest.mark.parametrize(
    "failures, warnings, fail_on_warning, expected",
    [
        (0, 0, False, False),
        (0, 0, True, False),
        (0, 1, False, False),
        (0, 1, True, True),
        (1, 0, False, True),
        (1, 0, True, True),
        (1, 1, False, True),
        (1, 1, True, True),
    ],
)
def test_failure_verdict(failures, warnings, fail_on_warning, expected):
    """Failures always fail the run, warnings only with fail_on_warning."""
    ledger = OutcomeLedger()
    for i in range(failures):
        ledger.failure(f"F{i}", "boom")
    for i in range(warnings):
        ledger.warning(f"W{i}", "memory stream")

    assert ledger.is_failed(fail_on_warning) is expected


def test_ledger_keeps_order_and_kinds():
    ledger = OutcomeLedger()

    ledger.success("A")
    ledger.warning("B", "skipped")
    ledger.failure("C", "boom")
    ledger.failure("D", "bang")

    assert ledger.succeeded == ["A"]
    assert ledger.warnings == [OutcomeRecord("B", OutcomeKind.WARNING, "skipped")]
    assert [str(f) for f in ledger.failures] == ["C: boom", "D: bang"]
    assert ledger.processed == 4
    assert ledger.as_details() == {
        "succeeded": ["A"],
        "warnings": ["B: skipped"],
        "failures": ["C: boom", "D: bang"],
    }


def test_render_ledger_is_silent_without_problems():
    out = io.StringIO()
    ledger = OutcomeLedger()
    ledger.success("A")

    render_ledger(out, ledger, "Backup")

    assert out.getvalue() == ""


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 B"),
        (1023, "1023 B"),
        (1024, "1.0 KiB"),
        (1536, "1.5 KiB"),
        (20 * 1024, "20 KiB"),
        (5 * 1024**3, "5.0 GiB"),
    ],
)
def test_format_size(size, expected):
    assert format_size(size) == expected


def test_format_count():
    assert format_count(1234567) == "1,234,567"
