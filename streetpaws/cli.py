"""
Command-line interface for the StreetPaws analytics engine.
"""

import json
import logging

import click
from rich.console import Console
from rich.table import Table

from streetpaws.core.config import DEFAULT_RESOURCE_POOL, HOTSPOT_CONFIG, LOG_FORMAT, LOG_LEVEL
from streetpaws.data.processor import DataProcessor

console = Console()
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

PRIORITY_STYLES = {
    "Critical": "bold red",
    "High": "red",
    "Medium": "yellow",
    "Low": "green",
}


def _load_records(file_path):
    records = DataProcessor().load_json_file(file_path)
    if not records:
        console.print("[yellow]No incident records available.[/yellow]")
    return records


@click.group()
def main():
    """StreetPaws: incident hotspots, forecasts and resource planning."""
    pass


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--min-points", default=HOTSPOT_CONFIG["min_points"], show_default=True,
              help="Minimum reports per hotspot")
@click.option("--eps", default=HOTSPOT_CONFIG["eps"], show_default=True,
              help="Cluster radius in decimal degrees")
def hotspots(file_path, min_points, eps):
    """Detect incident hotspots in a JSON export."""
    from streetpaws.analysis.spatial import detect_hotspots

    records = _load_records(file_path)
    if not records:
        return

    found = detect_hotspots(records, min_points=min_points, eps=eps)
    if not found:
        console.print("[yellow]No hotspots detected.[/yellow]")
        return

    table = Table(title="StreetPaws - Incident Hotspots")
    table.add_column("Hotspot", style="bold")
    table.add_column("Center")
    table.add_column("Reports")
    table.add_column("Severity")
    table.add_column("Risk")
    table.add_column("Priority")

    for h in found:
        center = h["center"]
        table.add_row(
            h["id"],
            f"{center['latitude']:.4f}, {center['longitude']:.4f}",
            str(h["size"]),
            f"{h['severity']:.0%}",
            str(h["risk"]),
            f"{h['priority']:.2f}",
        )

    console.print(table)


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--year", default=None, type=int, help="Calendar year to aggregate (UTC)")
def forecast(file_path, year):
    """Forecast monthly report volume for the next six months."""
    from streetpaws.analysis.temporal import analyze_trend, forecast as forecast_series, monthly_counts

    records = _load_records(file_path)
    if not records:
        return

    series = monthly_counts(records, year=year)
    points = forecast_series(series)
    trend = analyze_trend(series)

    table = Table(title="StreetPaws - 6-Month Forecast")
    table.add_column("Month")
    table.add_column("Predicted")
    table.add_column("Confidence")
    table.add_column("Trend")
    for p in points:
        table.add_row(p["month"], str(p["predicted"]), f"{p['confidence']}%", p["trend"])

    console.print(table)
    console.print(
        f"Trend: [bold]{trend['trend']}[/bold] "
        f"(slope {trend['slope']}, confidence {trend['confidence']}%)"
    )


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--volunteers", default=DEFAULT_RESOURCE_POOL["volunteers"], show_default=True)
@click.option("--budget", default=DEFAULT_RESOURCE_POOL["budget"], show_default=True)
@click.option("--vehicles", default=DEFAULT_RESOURCE_POOL["vehicles"], show_default=True)
@click.option("--equipment", default=DEFAULT_RESOURCE_POOL["equipment"], show_default=True)
def allocate(file_path, volunteers, budget, vehicles, equipment):
    """Plan resource allocation across detected hotspots."""
    from streetpaws.analysis.spatial import detect_hotspots
    from streetpaws.models.recommender import generate_strategic_recommendations
    from streetpaws.models.resource_allocator import allocate_resources

    records = _load_records(file_path)
    if not records:
        return

    pool = {"volunteers": volunteers, "budget": budget,
            "vehicles": vehicles, "equipment": equipment}
    found = detect_hotspots(records)
    plans = allocate_resources(found, pool)
    strategic = generate_strategic_recommendations(found, pool)

    table = Table(title="StreetPaws - Resource Allocation")
    table.add_column("Hotspot", style="bold")
    table.add_column("Priority")
    table.add_column("Volunteers")
    table.add_column("Budget")
    table.add_column("Vehicles")
    table.add_column("Equipment")
    table.add_column("Success")
    table.add_column("Note")

    for plan in plans:
        level = plan["priority_level"]
        style = PRIORITY_STYLES.get(level, "white")
        granted = plan["resource_allocation"]
        table.add_row(
            str(plan["hotspot_id"]),
            f"[{style}]{level}[/{style}]",
            str(granted["volunteers"]),
            f"{granted['budget']:,}",
            str(granted["vehicles"]),
            str(granted["equipment"]),
            f"{plan['success_probability']:.0%}",
            plan.get("note") or "",
        )

    console.print(table)
    for rec in strategic["recommendations"]:
        style = PRIORITY_STYLES.get(rec["priority"], "white")
        console.print(f"[{style}]{rec['priority']}[/{style}] {rec['recommendation']} ({rec['timeframe']})")


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--year", default=None, type=int, help="Calendar year to aggregate (UTC)")
@click.option("--output", default=None, help="Write the JSON report to this file")
def report(file_path, year, output):
    """Generate the full analytics report."""
    from streetpaws.reports.report_generator import ReportGenerator

    records = _load_records(file_path)
    if not records:
        return

    result = ReportGenerator(records).generate_analytics_report(year=year)
    output_json = json.dumps(result, indent=2, default=str)
    if output:
        with open(output, "w") as f:
            f.write(output_json)
        console.print(f"[green]Report saved to {output}[/green]")
    else:
        console.print_json(output_json)


@main.command()
@click.option("--port", default=8000, help="Port to listen on")
def serve(port):
    """Start the analytics API server."""
    import uvicorn
    console.print(f"[green]Starting StreetPaws analytics on http://0.0.0.0:{port}[/green]")
    console.print(f"  API Docs:    http://localhost:{port}/docs")
    uvicorn.run("streetpaws.api.app:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
