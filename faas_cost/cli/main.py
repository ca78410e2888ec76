"""
CLI interface for FaaS Cost.

Provides command-line access to the cost estimator.
"""

import logging
import sys
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from faas_cost.config.loader import resolve_pricing_catalog
from faas_cost.core.catalog import Vendor
from faas_cost.core.engine import (
    Projection,
    cheapest_vendor,
    estimate_all,
    estimate_cost,
)
from faas_cost.core.usage import UsageInput

app = typer.Typer()
console = Console()

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

VENDOR_LABELS = {
    Vendor.AWS: "AWS Lambda",
    Vendor.AZURE: "Azure Functions",
    Vendor.GCLOUD: "Google Cloud Functions",
    Vendor.IBM: "IBM OpenWhisk",
}


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log calculation details"
    )
):
    """FaaS Cost CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )
    if ctx.invoked_subcommand is None:
        console.print("FaaS Cost - Use --help to see available commands")


@app.command()
def estimate(
    invocations: int = typer.Option(
        ...,
        "--invocations",
        "-n",
        help="Number of invocations in the billing period"
    ),
    exec_time_ms: float = typer.Option(
        ...,
        "--exec-time-ms",
        "-t",
        help="Estimated execution time per invocation in milliseconds"
    ),
    memory_mb: int = typer.Option(
        ...,
        "--memory-mb",
        "-m",
        help="Memory allocated per invocation in megabytes"
    ),
    vendor: Optional[str] = typer.Option(
        None,
        "--vendor",
        help="Only estimate for one vendor (aws, azure, gCloud, ibm)"
    ),
    projection: str = typer.Option(
        Projection.TOTAL.value,
        "--projection",
        "-p",
        help="Charge to print with --vendor (requestCharge, computeCharge, total)"
    ),
    pricing: Optional[str] = typer.Option(
        None,
        "--pricing",
        help="YAML pricing file (defaults to $FAAS_COST_PRICING or built-in rates)"
    )
):
    """
    Estimate serverless function cost across vendors.

    Without --vendor, prints request, compute and total cost for every
    configured vendor and marks the cheapest.
    """
    try:
        catalog = resolve_pricing_catalog(pricing)
        usage = UsageInput(
            invocation_count=invocations,
            execution_time_ms=exec_time_ms,
            memory_mb=memory_mb
        )

        if vendor is not None:
            cost = estimate_cost(usage, vendor, projection, catalog)
            console.print(_format_currency(cost))
            sys.exit(EXIT_CODE_PASS)

        breakdowns = estimate_all(usage, catalog)
        _display_breakdowns(usage, breakdowns)
        sys.exit(EXIT_CODE_PASS)

    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def vendors(
    pricing: Optional[str] = typer.Option(
        None,
        "--pricing",
        help="YAML pricing file (defaults to $FAAS_COST_PRICING or built-in rates)"
    )
):
    """Show the pricing table in use."""
    try:
        catalog = resolve_pricing_catalog(pricing)
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    table = Table(title="Vendor Pricing")
    table.add_column("Vendor")
    table.add_column("Free Requests", justify="right")
    table.add_column("Free GB-s", justify="right")
    table.add_column("$/GB-s", justify="right")
    table.add_column("$/1M Req", justify="right")

    cpu_billing = []
    for vendor_id in catalog.vendors():
        rates = catalog.get_pricing(vendor_id)
        table.add_row(
            vendor_id.value,
            f"{rates.free_requests:,}",
            f"{rates.free_gb_seconds:,}",
            str(rates.charge_per_gb_second),
            str(rates.charge_per_million_requests)
        )
        if rates.bills_cpu:
            cpu_billing.append((vendor_id, rates))
    console.print(table)

    for vendor_id, rates in cpu_billing:
        tiers = ", ".join(f"{mb}MB={mhz}MHz" for mb, mhz in sorted(rates.cpu_ghz_by_memory_mb.items()))
        console.print(
            f"{vendor_id.value} CPU: ${rates.charge_per_ghz_second}/GHz-s, "
            f"{rates.free_ghz_seconds:,} GHz-s free"
        )
        console.print(f"  tiers: {tiers}")


def _format_currency(amount: float) -> str:
    """Format currency with proper symbols and formatting."""
    return f"${abs(amount):,.2f}"


def _display_breakdowns(usage: UsageInput, breakdowns):
    """Display per-vendor costs as a table."""
    console.print("\n[bold]Estimated cost of deployment[/bold]")
    console.print(
        f"{usage.invocation_count:,} invocations x {usage.execution_time_ms:g} ms "
        f"at {usage.memory_mb} MB"
    )

    if not breakdowns:
        console.print("\n[dim]No vendors configured.[/]")
        return

    cheapest = cheapest_vendor(breakdowns)
    table = Table()
    table.add_column("Vendor")
    table.add_column("Request Cost", justify="right")
    table.add_column("Compute Cost", justify="right")
    table.add_column("Total", justify="right")

    for breakdown in breakdowns:
        label = VENDOR_LABELS[breakdown.vendor]
        if breakdown is cheapest:
            label = f"[green]{label} *[/]"
        table.add_row(
            label,
            _format_currency(float(breakdown.request_charge)),
            _format_currency(float(breakdown.compute_charge)),
            _format_currency(float(breakdown.total))
        )
    console.print(table)
    console.print("[dim]* lowest total[/]")


if __name__ == "__main__":
    app()
