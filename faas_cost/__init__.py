"""
FaaS Cost - serverless function cost estimation.

Estimates request and compute charges for AWS Lambda, Azure Functions,
Google Cloud Functions and IBM Cloud Functions.
"""

from .core import (
    CostBreakdown,
    InvalidUsage,
    PricingCatalog,
    Projection,
    UnknownVendor,
    UsageInput,
    Vendor,
    VendorPricing,
    estimate_all,
    estimate_cost,
)

__all__ = [
    "CostBreakdown",
    "InvalidUsage",
    "PricingCatalog",
    "Projection",
    "UnknownVendor",
    "UsageInput",
    "Vendor",
    "VendorPricing",
    "estimate_all",
    "estimate_cost",
]
