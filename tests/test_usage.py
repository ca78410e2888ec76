"""
Unit tests for usage validation and billing-unit normalization.
"""

import math
from decimal import Decimal

import pytest

from faas_cost.core.catalog import DEFAULT_CATALOG, Vendor, VendorPricing
from faas_cost.core.usage import InvalidUsage, UsageInput, normalize_usage


class TestUsageInput:
    """Test UsageInput validation."""

    def test_valid_usage(self):
        usage = UsageInput(invocation_count=10, execution_time_ms=12.5, memory_mb=128)
        assert usage.invocation_count == 10
        assert usage.execution_time_ms == 12.5
        assert usage.memory_mb == 128

    def test_zero_usage_is_valid(self):
        """Zero invocations and zero execution time are valid inputs."""
        usage = UsageInput(invocation_count=0, execution_time_ms=0, memory_mb=128)
        assert usage.invocation_count == 0

    def test_whole_float_counts_are_accepted(self):
        usage = UsageInput(invocation_count=2e6, execution_time_ms=100, memory_mb=128.0)
        assert usage.invocation_count == 2_000_000
        assert isinstance(usage.invocation_count, int)
        assert isinstance(usage.memory_mb, int)

    @pytest.mark.parametrize("field, kwargs", [
        ("invocation_count", dict(invocation_count=-1, execution_time_ms=100, memory_mb=128)),
        ("execution_time_ms", dict(invocation_count=1, execution_time_ms=-0.5, memory_mb=128)),
        ("memory_mb", dict(invocation_count=1, execution_time_ms=100, memory_mb=-128)),
    ])
    def test_negative_fields_raise_error(self, field, kwargs):
        """Negative values are rejected, never clamped."""
        with pytest.raises(InvalidUsage, match="must be >= 0") as excinfo:
            UsageInput(**kwargs)
        assert excinfo.value.field == field

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    def test_non_finite_execution_time_raises_error(self, value):
        with pytest.raises(InvalidUsage, match="must be finite"):
            UsageInput(invocation_count=1, execution_time_ms=value, memory_mb=128)

    @pytest.mark.parametrize("field, kwargs", [
        ("invocation_count", dict(invocation_count=math.inf, execution_time_ms=100, memory_mb=128)),
        ("memory_mb", dict(invocation_count=1, execution_time_ms=100, memory_mb=math.inf)),
        ("execution_time_ms", dict(invocation_count=1, execution_time_ms=Decimal("NaN"), memory_mb=128)),
        ("memory_mb", dict(invocation_count=1, execution_time_ms=100, memory_mb=Decimal("Infinity"))),
    ])
    def test_non_finite_fields_raise_error(self, field, kwargs):
        with pytest.raises(InvalidUsage, match="must be finite") as excinfo:
            UsageInput(**kwargs)
        assert excinfo.value.field == field

    def test_decimal_inputs_are_accepted(self):
        usage = UsageInput(
            invocation_count=Decimal("10"), execution_time_ms=Decimal("2.5"), memory_mb=Decimal("128")
        )
        assert usage.invocation_count == 10
        assert usage.memory_mb == 128

    def test_zero_memory_raises_error(self):
        with pytest.raises(InvalidUsage, match="memory_mb: must be > 0"):
            UsageInput(invocation_count=1, execution_time_ms=100, memory_mb=0)

    def test_fractional_invocations_raise_error(self):
        with pytest.raises(InvalidUsage, match="whole number"):
            UsageInput(invocation_count=1.5, execution_time_ms=100, memory_mb=128)

    def test_non_numeric_raises_error(self):
        with pytest.raises(InvalidUsage, match="must be a number"):
            UsageInput(invocation_count="10", execution_time_ms=100, memory_mb=128)

    def test_boolean_raises_error(self):
        with pytest.raises(InvalidUsage, match="must be a number"):
            UsageInput(invocation_count=True, execution_time_ms=100, memory_mb=128)

    def test_invalid_usage_is_value_error(self):
        with pytest.raises(ValueError):
            UsageInput(invocation_count=1, execution_time_ms=100, memory_mb=0)


class TestFromGatewayMetrics:
    """Test deriving usage from OpenFaaS gateway counters."""

    def test_average_execution_time(self):
        """seconds_sum / invocation_total, converted to milliseconds."""
        usage = UsageInput.from_gateway_metrics(
            seconds_sum=12.5, invocation_total=100, memory_mb=128
        )
        assert usage.invocation_count == 100
        assert usage.execution_time_ms == 125.0
        assert usage.memory_mb == 128

    def test_never_invoked_function(self):
        usage = UsageInput.from_gateway_metrics(
            seconds_sum=0, invocation_total=0, memory_mb=256
        )
        assert usage.invocation_count == 0
        assert usage.execution_time_ms == 0.0

    def test_negative_counter_raises_error(self):
        with pytest.raises(InvalidUsage, match="seconds_sum"):
            UsageInput.from_gateway_metrics(
                seconds_sum=-1, invocation_total=10, memory_mb=128
            )


class TestNormalizeUsage:
    """Test conversion to billable GB-seconds."""

    def test_aws_reference_scenario(self):
        """2M invocations x 100ms at 128MB stays inside the AWS compute free tier."""
        usage = UsageInput(invocation_count=2_000_000, execution_time_ms=100, memory_mb=128)
        normalized = normalize_usage(usage, DEFAULT_CATALOG.get_pricing(Vendor.AWS))

        assert normalized.billable_invocations == 1_000_000
        assert normalized.compute_seconds == Decimal("100000")
        assert normalized.gb_seconds == Decimal("12500")
        assert normalized.billable_gb_seconds == Decimal("0")

    def test_free_gb_seconds_subtracted(self):
        usage = UsageInput(invocation_count=3_000_000, execution_time_ms=1000, memory_mb=1024)
        normalized = normalize_usage(usage, DEFAULT_CATALOG.get_pricing(Vendor.AWS))

        assert normalized.billable_invocations == 2_000_000
        assert normalized.gb_seconds == Decimal("2000000")
        assert normalized.billable_gb_seconds == Decimal("1600000")

    def test_full_invocation_billing(self):
        """Google bills compute on every invocation, not net of free requests."""
        usage = UsageInput(invocation_count=3_000_000, execution_time_ms=1000, memory_mb=1024)
        normalized = normalize_usage(
            usage,
            DEFAULT_CATALOG.get_pricing(Vendor.GCLOUD),
            bill_full_invocations=True
        )

        assert normalized.billable_invocations == 3_000_000
        assert normalized.gb_seconds == Decimal("3000000")
        assert normalized.billable_gb_seconds == Decimal("2600000")

    def test_invocations_below_free_requests_clamp_to_zero(self):
        usage = UsageInput(invocation_count=10, execution_time_ms=1000, memory_mb=1024)
        normalized = normalize_usage(usage, DEFAULT_CATALOG.get_pricing(Vendor.AWS))

        assert normalized.billable_invocations == 0
        assert normalized.compute_seconds == Decimal("0")
        assert normalized.billable_gb_seconds == Decimal("0")

    def test_fractional_memory_ratio(self):
        pricing = VendorPricing(
            free_requests=0,
            free_gb_seconds=Decimal("0"),
            charge_per_gb_second=Decimal("1"),
            charge_per_million_requests=Decimal("0"),
        )
        usage = UsageInput(invocation_count=1024, execution_time_ms=1000, memory_mb=1000)
        normalized = normalize_usage(usage, pricing)

        assert normalized.compute_seconds == Decimal("1024")
        assert normalized.gb_seconds == Decimal("1000")
