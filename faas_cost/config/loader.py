"""
Pricing configuration loading.

Reads vendor pricing tables from YAML so rate changes need no code changes.
"""

import logging
import os
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Optional

import yaml

from faas_cost.core.catalog import DEFAULT_CATALOG, PricingCatalog, Vendor, VendorPricing

logger = logging.getLogger(__name__)

PRICING_ENV_VAR = "FAAS_COST_PRICING"

REQUIRED_VENDOR_KEYS = {
    'free_requests',
    'free_gb_seconds',
    'charge_per_gb_second',
    'charge_per_million_requests',
}
GOOGLE_ONLY_KEYS = {
    'charge_per_ghz_second',
    'free_ghz_seconds',
    'cpu_ghz_by_memory_mb',
}


def load_pricing_catalog(path: str) -> PricingCatalog:
    """Load and validate a pricing catalog from a YAML file.

    Strict validation ensures a typo in a rate key fails loudly instead of
    silently falling back to zero.

    Args:
        path: Path to YAML pricing file

    Returns:
        Validated PricingCatalog

    Raises:
        FileNotFoundError: If pricing file doesn't exist
        yaml.YAMLError: If YAML is invalid
        UnknownVendor: If a vendor id is not supported
        ValueError: If the pricing configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Pricing config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in pricing file {path}: {e}")

    if not raw_config:
        raise ValueError("Pricing file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Pricing file must contain a mapping")

    allowed_top_keys = {'vendors'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    if 'vendors' not in raw_config:
        raise ValueError("Missing required 'vendors' section")

    vendors_data = raw_config['vendors']
    if not isinstance(vendors_data, dict) or not vendors_data:
        raise ValueError("'vendors' must be a non-empty dictionary")

    prices = {}
    for vendor_id, vendor_data in vendors_data.items():
        vendor = Vendor.parse(vendor_id)
        if not isinstance(vendor_data, dict):
            raise ValueError(f"Vendor '{vendor_id}' must be a dictionary")
        prices[vendor] = _parse_vendor_pricing(vendor, vendor_data, f"vendors.{vendor_id}")

    logger.info("Loaded pricing for %d vendor(s) from %s", len(prices), path)
    return PricingCatalog(prices)


def resolve_pricing_catalog(path: Optional[str] = None) -> PricingCatalog:
    """Load the catalog from path, or from $FAAS_COST_PRICING, or use defaults."""
    path = path or os.environ.get(PRICING_ENV_VAR)
    if not path:
        return DEFAULT_CATALOG
    return load_pricing_catalog(path)


def _parse_vendor_pricing(vendor: Vendor, data: Dict, path: str) -> VendorPricing:
    """Parse and validate one vendor's pricing.

    Args:
        vendor: Vendor being parsed
        data: Vendor pricing data
        path: Path for error messages

    Returns:
        Validated VendorPricing

    Raises:
        ValueError: If pricing is invalid
    """
    allowed_keys = set(REQUIRED_VENDOR_KEYS)
    if vendor == Vendor.GCLOUD:
        allowed_keys |= GOOGLE_ONLY_KEYS
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")

    for key in sorted(REQUIRED_VENDOR_KEYS):
        if key not in data:
            raise ValueError(f"Missing required '{key}' in {path}")

    free_requests = data['free_requests']
    if isinstance(free_requests, bool) or not isinstance(free_requests, int) or free_requests < 0:
        raise ValueError(f"'free_requests' in {path} must be a non-negative integer")

    kwargs = {
        'free_requests': free_requests,
        'free_gb_seconds': _parse_amount(data, 'free_gb_seconds', path),
        'charge_per_gb_second': _parse_amount(data, 'charge_per_gb_second', path),
        'charge_per_million_requests': _parse_amount(data, 'charge_per_million_requests', path),
    }
    if 'charge_per_ghz_second' in data:
        kwargs['charge_per_ghz_second'] = _parse_amount(data, 'charge_per_ghz_second', path)
    if 'free_ghz_seconds' in data:
        kwargs['free_ghz_seconds'] = _parse_amount(data, 'free_ghz_seconds', path)
    if 'cpu_ghz_by_memory_mb' in data:
        kwargs['cpu_ghz_by_memory_mb'] = _parse_cpu_tiers(data['cpu_ghz_by_memory_mb'], path)

    return VendorPricing(**kwargs)


def _parse_amount(data: Dict, key: str, path: str) -> Decimal:
    """Parse a non-negative number keeping the precision written in YAML."""
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"'{key}' in {path} must be a number")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"'{key}' in {path} must be a number")
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"'{key}' in {path} must be >= 0")
    return amount


def _parse_cpu_tiers(data, path: str) -> Dict[int, int]:
    """Parse the memory tier (MB) to CPU allotment (MHz) table."""
    if not isinstance(data, dict) or not data:
        raise ValueError(f"'cpu_ghz_by_memory_mb' in {path} must be a non-empty dictionary")

    tiers = {}
    for memory_mb, mhz in data.items():
        try:
            memory_key = int(memory_mb)
        except (TypeError, ValueError):
            raise ValueError(f"Memory tier '{memory_mb}' in {path} must be an integer")
        if isinstance(mhz, bool) or not isinstance(mhz, int) or mhz <= 0 or memory_key <= 0:
            raise ValueError(
                f"'cpu_ghz_by_memory_mb.{memory_mb}' in {path} must be a positive integer"
            )
        tiers[memory_key] = mhz
    return tiers
