"""
Core modules for FaaS Cost.

This package contains the pricing catalog, usage normalization and
the cost engine.
"""

from .catalog import DEFAULT_CATALOG, PricingCatalog, UnknownVendor, Vendor, VendorPricing
from .engine import (
    CostBreakdown,
    Projection,
    calculate_breakdown,
    cheapest_vendor,
    estimate_all,
    estimate_cost,
    round_currency,
)
from .usage import InvalidUsage, NormalizedUsage, UsageInput, normalize_usage

__all__ = [
    "DEFAULT_CATALOG",
    "CostBreakdown",
    "InvalidUsage",
    "NormalizedUsage",
    "PricingCatalog",
    "Projection",
    "UnknownVendor",
    "UsageInput",
    "Vendor",
    "VendorPricing",
    "calculate_breakdown",
    "cheapest_vendor",
    "estimate_all",
    "estimate_cost",
    "normalize_usage",
    "round_currency",
]
