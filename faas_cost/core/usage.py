"""
Usage inputs and billing-unit normalization.

Converts invocation counts, execution time and memory into the
compute-seconds and GB-seconds that vendors bill on.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from numbers import Integral, Real

from .catalog import VendorPricing

MS_PER_SECOND = Decimal("1000")
MB_PER_GB = Decimal("1024")


class InvalidUsage(ValueError):
    """Raised when a usage field is negative, non-finite or otherwise unusable."""
    def __init__(self, field: str, message: str):
        super().__init__(f"Invalid {field}: {message}")
        self.field = field


def to_decimal(value) -> Decimal:
    """Convert a number to Decimal keeping its written precision."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _check_number(name: str, value, integral: bool) -> None:
    if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
        raise InvalidUsage(name, f"must be a number, got {value!r}")
    if isinstance(value, Decimal):
        finite = value.is_finite()
    else:
        finite = math.isfinite(value)
    if not finite:
        raise InvalidUsage(name, "must be finite")
    if value < 0:
        raise InvalidUsage(name, "must be >= 0")
    if integral and not isinstance(value, Integral) and value != int(value):
        raise InvalidUsage(name, "must be a whole number")


@dataclass(frozen=True)
class UsageInput:
    """Function usage for one billing period.

    Attributes:
        invocation_count: Number of invocations
        execution_time_ms: Estimated execution time per invocation (ms)
        memory_mb: Memory allocated per invocation (MB)
    """
    invocation_count: int
    execution_time_ms: float
    memory_mb: int

    def __post_init__(self):
        """Reject negative, non-finite and zero-memory inputs. Never clamps."""
        _check_number("invocation_count", self.invocation_count, integral=True)
        _check_number("execution_time_ms", self.execution_time_ms, integral=False)
        _check_number("memory_mb", self.memory_mb, integral=True)
        if self.memory_mb == 0:
            raise InvalidUsage("memory_mb", "must be > 0")
        object.__setattr__(self, "invocation_count", int(self.invocation_count))
        object.__setattr__(self, "memory_mb", int(self.memory_mb))

    @classmethod
    def from_gateway_metrics(
        cls,
        seconds_sum: float,
        invocation_total: int,
        memory_mb: int
    ) -> "UsageInput":
        """Build usage from OpenFaaS gateway counters.

        Average execution time is gateway_functions_seconds_sum divided by
        gateway_function_invocation_total. A function that was never invoked
        has an execution time of 0.

        Raises:
            InvalidUsage: If any counter is negative or non-finite
        """
        _check_number("seconds_sum", seconds_sum, integral=False)
        _check_number("invocation_total", invocation_total, integral=True)
        if invocation_total == 0:
            avg_ms = 0.0
        else:
            avg_ms = float(to_decimal(seconds_sum) / to_decimal(invocation_total) * MS_PER_SECOND)
        return cls(
            invocation_count=invocation_total,
            execution_time_ms=avg_ms,
            memory_mb=memory_mb
        )


@dataclass(frozen=True)
class NormalizedUsage:
    """Usage expressed in billing units for one vendor."""
    billable_invocations: int
    compute_seconds: Decimal
    gb_seconds: Decimal
    billable_gb_seconds: Decimal


def normalize_usage(
    usage: UsageInput,
    pricing: VendorPricing,
    bill_full_invocations: bool = False
) -> NormalizedUsage:
    """Convert usage into billable GB-seconds for a vendor.

    Args:
        usage: Validated usage input
        pricing: Vendor pricing supplying the free allowances
        bill_full_invocations: Compute is billed on every invocation rather
            than on those above the free-request allowance (Google)

    Returns:
        NormalizedUsage with the intermediate billing quantities
    """
    if bill_full_invocations:
        billable_invocations = usage.invocation_count
    else:
        billable_invocations = max(usage.invocation_count - pricing.free_requests, 0)

    exec_seconds = to_decimal(usage.execution_time_ms) / MS_PER_SECOND
    compute_seconds = max(billable_invocations * exec_seconds, Decimal("0"))
    gb_seconds = compute_seconds * (Decimal(usage.memory_mb) / MB_PER_GB)
    billable_gb_seconds = max(gb_seconds - pricing.free_gb_seconds, Decimal("0"))

    return NormalizedUsage(
        billable_invocations=billable_invocations,
        compute_seconds=compute_seconds,
        gb_seconds=gb_seconds,
        billable_gb_seconds=billable_gb_seconds
    )
