"""
Vendor pricing catalog.

Holds the per-vendor free tiers and unit charges used by the cost engine.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Union


class UnknownVendor(ValueError):
    """Raised when a vendor id is not in the supported set or the catalog."""
    def __init__(self, vendor: object):
        super().__init__(f"Unknown vendor: {vendor}")
        self.vendor = vendor


class Vendor(Enum):
    """Supported serverless vendors, valued by their wire ids."""
    AWS = "aws"
    AZURE = "azure"
    GCLOUD = "gCloud"
    IBM = "ibm"

    @classmethod
    def parse(cls, value: Union["Vendor", str]) -> "Vendor":
        """Resolve a vendor id.

        Raises:
            UnknownVendor: If the id is not one of aws, azure, gCloud, ibm
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownVendor(value) from None


@dataclass(frozen=True)
class VendorPricing:
    """Free tiers and unit charges for one vendor."""
    free_requests: int
    free_gb_seconds: Decimal
    charge_per_gb_second: Decimal
    charge_per_million_requests: Decimal
    # Google only
    charge_per_ghz_second: Decimal = Decimal("0")
    free_ghz_seconds: Decimal = Decimal("0")
    cpu_ghz_by_memory_mb: Mapping[int, int] = field(default_factory=dict)

    def __post_init__(self):
        """Validate that no allowance or charge is negative."""
        for name in (
            "free_requests",
            "free_gb_seconds",
            "charge_per_gb_second",
            "charge_per_million_requests",
            "charge_per_ghz_second",
            "free_ghz_seconds",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        for memory_mb, mhz in self.cpu_ghz_by_memory_mb.items():
            if memory_mb <= 0 or mhz <= 0:
                raise ValueError(
                    f"cpu_ghz_by_memory_mb entries must be > 0, got {memory_mb}: {mhz}"
                )
        object.__setattr__(
            self, "cpu_ghz_by_memory_mb", MappingProxyType(dict(self.cpu_ghz_by_memory_mb))
        )

    @property
    def bills_cpu(self) -> bool:
        """Whether any memory tier carries a CPU allotment."""
        return bool(self.cpu_ghz_by_memory_mb)


@dataclass(frozen=True)
class PricingCatalog:
    """Read-only pricing table keyed by vendor."""
    prices: Mapping[Vendor, VendorPricing]

    def __post_init__(self):
        object.__setattr__(self, "prices", MappingProxyType(dict(self.prices)))

    def get_pricing(self, vendor: Union[Vendor, str]) -> VendorPricing:
        """Get pricing for a specific vendor.

        Args:
            vendor: Vendor enum member or wire id

        Returns:
            VendorPricing for the vendor

        Raises:
            UnknownVendor: If the vendor is unsupported or not configured
        """
        resolved = Vendor.parse(vendor)
        if resolved not in self.prices:
            raise UnknownVendor(resolved.value)
        return self.prices[resolved]

    def vendors(self) -> List[Vendor]:
        """Configured vendors in declaration order."""
        return [vendor for vendor in Vendor if vendor in self.prices]


# MHz of CPU allotted per memory tier on Google Cloud Functions (1st gen)
GOOGLE_CPU_MHZ_BY_MEMORY_MB: Dict[int, int] = {
    128: 200,
    256: 400,
    512: 800,
    1024: 1400,
    2048: 2400,
}

# Published rates at the time of writing; inject a loaded catalog to override
DEFAULT_CATALOG = PricingCatalog({
    Vendor.AWS: VendorPricing(
        free_requests=1_000_000,
        free_gb_seconds=Decimal("400000"),
        charge_per_gb_second=Decimal("0.0000166667"),
        charge_per_million_requests=Decimal("0.20"),
    ),
    Vendor.AZURE: VendorPricing(
        free_requests=1_000_000,
        free_gb_seconds=Decimal("400000"),
        charge_per_gb_second=Decimal("0.000016"),
        charge_per_million_requests=Decimal("0.20"),
    ),
    Vendor.GCLOUD: VendorPricing(
        free_requests=2_000_000,
        free_gb_seconds=Decimal("400000"),
        charge_per_gb_second=Decimal("0.0000025"),
        charge_per_million_requests=Decimal("0.40"),
        charge_per_ghz_second=Decimal("0.0000100"),
        free_ghz_seconds=Decimal("200000"),
        cpu_ghz_by_memory_mb=GOOGLE_CPU_MHZ_BY_MEMORY_MB,
    ),
    Vendor.IBM: VendorPricing(
        free_requests=5_000_000,
        free_gb_seconds=Decimal("400000"),
        charge_per_gb_second=Decimal("0.000017"),
        charge_per_million_requests=Decimal("0"),
    ),
})
