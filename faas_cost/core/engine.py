"""
Serverless cost engine.

Applies free-tier gating, per-vendor compute billing and request charges
to produce a cost breakdown.

Billing Order:
1. Free-request gate - nothing is charged until invocations exceed the
   vendor's free-request allowance (compute included)
2. Compute charge - billable GB-seconds, plus billable GHz-seconds for
   Google memory tiers that carry a CPU allotment
3. Request charge - invocations above the allowance at the per-million rate
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from enum import Enum
from typing import Iterable, List, Union

from .catalog import DEFAULT_CATALOG, PricingCatalog, Vendor, VendorPricing
from .usage import InvalidUsage, UsageInput, normalize_usage

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
MHZ_PER_GHZ = Decimal("1000")
REQUESTS_PER_MILLION = Decimal("1000000")
ZERO = Decimal("0")


class Projection(Enum):
    """Which field of a breakdown the caller wants."""
    REQUEST_CHARGE = "requestCharge"
    COMPUTE_CHARGE = "computeCharge"
    TOTAL = "total"

    @classmethod
    def parse(cls, value: Union["Projection", str]) -> "Projection":
        """Resolve a projection id, accepting the short dashboard ids too."""
        if isinstance(value, cls):
            return value
        aliases = {"reqCharge": cls.REQUEST_CHARGE, "computeCost": cls.COMPUTE_CHARGE}
        if value in aliases:
            return aliases[value]
        try:
            return cls(value)
        except ValueError:
            valid = [projection.value for projection in cls]
            raise ValueError(f"projection must be one of: {valid}") from None


def round_currency(value: Decimal) -> Decimal:
    """Round to cents, ties away from zero.

    Precision is widened so that every integer digit plus two decimal
    places fits, however large the charge.
    """
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CostBreakdown:
    """Request, compute and total charges for one vendor."""
    vendor: Vendor
    request_charge: Decimal
    compute_charge: Decimal
    total: Decimal

    @classmethod
    def zero(cls, vendor: Vendor) -> "CostBreakdown":
        return cls(vendor=vendor, request_charge=ZERO, compute_charge=ZERO, total=ZERO)

    def rounded(self) -> "CostBreakdown":
        """Round each field once.

        The total is rounded from the unrounded sum, not summed from the
        rounded parts.
        """
        return CostBreakdown(
            vendor=self.vendor,
            request_charge=round_currency(self.request_charge),
            compute_charge=round_currency(self.compute_charge),
            total=round_currency(self.request_charge + self.compute_charge)
        )

    def project(self, projection: Union[Projection, str]) -> float:
        """Get a single rounded field as a float."""
        rounded = self.rounded()
        value = {
            Projection.REQUEST_CHARGE: rounded.request_charge,
            Projection.COMPUTE_CHARGE: rounded.compute_charge,
            Projection.TOTAL: rounded.total,
        }[Projection.parse(projection)]
        return float(value)


def _compute_charge(usage: UsageInput, vendor: Vendor, pricing: VendorPricing) -> Decimal:
    # Google bills compute on every invocation; the free tier only comes off GB/GHz-seconds
    bill_full = vendor == Vendor.GCLOUD
    normalized = normalize_usage(usage, pricing, bill_full_invocations=bill_full)
    memory_charge = normalized.billable_gb_seconds * pricing.charge_per_gb_second

    # CPU is billed by Google only, even if another vendor's record carries tiers
    if vendor != Vendor.GCLOUD:
        return memory_charge
    cpu_mhz = pricing.cpu_ghz_by_memory_mb.get(usage.memory_mb)
    if not cpu_mhz:
        return memory_charge

    ghz_seconds = normalized.gb_seconds * (Decimal(cpu_mhz) / MHZ_PER_GHZ)
    billable_ghz_seconds = max(ghz_seconds - pricing.free_ghz_seconds, ZERO)
    return memory_charge + billable_ghz_seconds * pricing.charge_per_ghz_second


def calculate_breakdown(
    usage: UsageInput,
    vendor: Union[Vendor, str],
    catalog: PricingCatalog = DEFAULT_CATALOG
) -> CostBreakdown:
    """Calculate the unrounded cost breakdown for one vendor.

    Args:
        usage: Validated usage input
        vendor: Vendor enum member or wire id
        catalog: Pricing catalog to read rates from

    Returns:
        CostBreakdown; all zero when invocations do not exceed the
        vendor's free-request allowance

    Raises:
        UnknownVendor: If the vendor is unsupported or not in the catalog
    """
    resolved = Vendor.parse(vendor)
    pricing = catalog.get_pricing(resolved)

    if usage.invocation_count <= pricing.free_requests:
        logger.debug(
            "%s: %d invocations within %d free requests, no charge",
            resolved.value, usage.invocation_count, pricing.free_requests
        )
        return CostBreakdown.zero(resolved)

    compute_charge = _compute_charge(usage, resolved, pricing)
    request_charge = (
        Decimal(usage.invocation_count - pricing.free_requests)
        * (pricing.charge_per_million_requests / REQUESTS_PER_MILLION)
    )

    breakdown = CostBreakdown(
        vendor=resolved,
        request_charge=request_charge,
        compute_charge=compute_charge,
        total=request_charge + compute_charge
    )
    logger.debug(
        "%s: request=%s compute=%s total=%s",
        resolved.value, request_charge, compute_charge, breakdown.total
    )
    return breakdown


def estimate_cost(
    usage: UsageInput,
    vendor: Union[Vendor, str],
    projection: Union[Projection, str] = Projection.TOTAL,
    catalog: PricingCatalog = DEFAULT_CATALOG
) -> float:
    """Estimate one rounded charge for a vendor.

    Args:
        usage: Validated usage input
        vendor: Vendor enum member or wire id
        projection: requestCharge, computeCharge or total
        catalog: Pricing catalog to read rates from

    Returns:
        The requested charge rounded to 2 decimal places; 0.0 when the
        free-request gate is not exceeded

    Raises:
        InvalidUsage: If usage is not a valid UsageInput
        UnknownVendor: If the vendor is unsupported or not in the catalog
    """
    if not isinstance(usage, UsageInput):
        raise InvalidUsage("usage", f"expected UsageInput, got {type(usage).__name__}")
    projection = Projection.parse(projection)
    return calculate_breakdown(usage, vendor, catalog).project(projection)


def estimate_all(
    usage: UsageInput,
    catalog: PricingCatalog = DEFAULT_CATALOG
) -> List[CostBreakdown]:
    """Rounded breakdowns for every vendor in the catalog, in catalog order."""
    return [
        calculate_breakdown(usage, vendor, catalog).rounded()
        for vendor in catalog.vendors()
    ]


def cheapest_vendor(breakdowns: Iterable[CostBreakdown]) -> CostBreakdown:
    """Breakdown with the lowest total; ties keep the first one.

    Raises:
        ValueError: If no breakdowns are given
    """
    breakdowns = list(breakdowns)
    if not breakdowns:
        raise ValueError("No breakdowns to compare")
    return min(breakdowns, key=lambda breakdown: breakdown.total)
