"""Tests for the engine invocation tracer (taxfit_engines/tracer.py)."""

from decimal import Decimal

import pytest

from taxfit_engines.adjustment import AdjustmentRequest
from taxfit_engines.tax import RoundMode
from taxfit_engines.tracer import (
    TRACE_MESSAGE,
    _canonicalize,
    compute_input_fingerprint,
    traced_engine,
)


class TestCanonicalize:
    """Stable string forms used for fingerprinting."""

    def test_scalars(self):
        assert _canonicalize(None) == "null"
        assert _canonicalize(True) == "true"
        assert _canonicalize(42) == "42"
        assert _canonicalize("abc") == "abc"

    def test_decimal_normalized(self):
        assert _canonicalize(Decimal("0.10")) == _canonicalize(Decimal("0.1"))

    def test_enum_uses_value(self):
        assert _canonicalize(RoundMode.NEAREST) == "nearest"

    def test_dict_keys_sorted(self):
        assert _canonicalize({"b": 1, "a": 2}) == "{a:2,b:1}"

    def test_dataclass_fields(self):
        request = AdjustmentRequest(subtotal=10, target_total=11, tax_rate="0.1")
        assert _canonicalize(request) == (
            "{round_mode:floor,subtotal:10,target_total:11,tax_rate:0.1}"
        )


class TestFingerprint:
    """Deterministic input fingerprints."""

    def test_length_and_determinism(self):
        fp1 = compute_input_fingerprint(("a", "b"), {"a": 1, "b": "x"})
        fp2 = compute_input_fingerprint(("a", "b"), {"b": "x", "a": 1})
        assert fp1 == fp2
        assert len(fp1) == 16

    def test_missing_field_recorded_as_null(self):
        assert compute_input_fingerprint(("a",), {}) == compute_input_fingerprint(
            ("a",), {"a": None}
        )

    def test_different_inputs_differ(self):
        assert compute_input_fingerprint(("a",), {"a": 1}) != compute_input_fingerprint(
            ("a",), {"a": 2}
        )


class TestTracedEngine:
    """The decorator logs one trace record and returns the result unchanged."""

    def test_trace_record(self, captured_logs):
        @traced_engine("demo", "2.1", fingerprint_fields=("x",))
        def double(x):
            return x * 2

        assert double(x=21) == 42

        traces = [r for r in captured_logs() if r["message"] == TRACE_MESSAGE]
        assert len(traces) == 1
        assert traces[0]["engine_name"] == "demo"
        assert traces[0]["engine_version"] == "2.1"
        assert traces[0]["input_fingerprint"] == compute_input_fingerprint(
            ("x",), {"x": 21}
        )
        assert traces[0]["function"].endswith("double")
        assert traces[0]["duration_ms"] >= 0

    def test_no_fingerprint_fields(self, captured_logs):
        @traced_engine("demo", "1.0")
        def noop():
            return None

        noop()
        traces = [r for r in captured_logs() if r["message"] == TRACE_MESSAGE]
        assert traces[0]["input_fingerprint"] == ""

    def test_exception_propagates_without_trace(self, captured_logs):
        @traced_engine("demo", "1.0")
        def boom():
            raise RuntimeError("engine failure")

        with pytest.raises(RuntimeError, match="engine failure"):
            boom()
        assert not [r for r in captured_logs() if r["message"] == TRACE_MESSAGE]
