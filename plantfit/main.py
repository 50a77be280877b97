"""
Plant advisor command line entry point.

Usage:
    python -m plantfit.main check
    python -m plantfit.main search "pomidor"
    python -m plantfit.main fit "Tomato" --lat 52.23 --lon 21.01 --orientation 180 --weather weather.json
"""

from __future__ import annotations

# Load .env before anything reads the environment
import plantfit.config  # noqa: F401, E402

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from plantfit.config import ClientConfig, get_settings
from plantfit.errors import OpenRouterError
from plantfit.llm_client import OpenRouterClient
from plantfit.models import CellPosition, ClimateSummary, FitContext, FitResult, Location, MonthlyWeather
from plantfit.observability import metrics as obs_metrics

_CUSTOM_THEME = Theme({
    "log.warning": "bold #f59e0b",
    "log.error":   "bold #dc2626",
    "log.key":     "#64748b",
    "log.val":     "#94a3b8",
    "primary":     "#16a34a",
    "score.good":  "bold #16a34a",
    "score.fair":  "bold #f59e0b",
    "score.bad":   "bold #dc2626",
})

console = Console(theme=_CUSTOM_THEME, highlight=False, stderr=True)
out = Console(theme=_CUSTOM_THEME, highlight=False)


class _RichStructlogRenderer:
    """Custom structlog processor that renders log lines via Rich."""

    _SKIP_KEYS = frozenset({"event", "level", "exc_info", "exception", "_record"})

    def __call__(self, logger_: object, method: str, event_dict: dict) -> str:  # noqa: ARG002
        event = event_dict.get("event", "")
        level = event_dict.get("level", "info").lower()

        kv_parts = []
        for k, v in event_dict.items():
            if k in self._SKIP_KEYS:
                continue
            vs = str(v)
            if len(vs) > 120:
                vs = vs[:117] + "…"
            kv_parts.append(f"[log.key]{k}[/log.key]=[log.val]{vs}[/log.val]")
        kv_str = "  ".join(kv_parts)

        if level == "warning":
            prefix, ev_fmt = "[log.warning]⚠[/log.warning]", f"[log.warning]{event}[/log.warning]"
        elif level in ("error", "critical"):
            prefix, ev_fmt = "[log.error]✗[/log.error]", f"[log.error]{event}[/log.error]"
        else:
            prefix, ev_fmt = "[primary]▪[/primary]", f"[bold]{event}[/bold]"

        console.print(f"  {prefix} {ev_fmt}  {kv_str}")
        if event_dict.get("exception"):
            console.print(event_dict["exception"], markup=False, emoji=False, style="log.val")
        raise structlog.DropEvent()


def configure_logging(level_name: str = "INFO") -> None:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.format_exc_info,
            _RichStructlogRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )


def _score_style(score: int) -> str:
    if score >= 4:
        return "score.good"
    if score == 3:
        return "score.fair"
    return "score.bad"


def load_weather(path: Optional[str]) -> list[MonthlyWeather]:
    """Read a JSON list of monthly observations (normalized 0-100 figures)."""
    if not path:
        return []
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return TypeAdapter(list[MonthlyWeather]).validate_python(raw)


def build_fit_context(args: argparse.Namespace) -> FitContext:
    weather = load_weather(args.weather)
    climate = ClimateSummary.from_monthly(weather, zone=args.zone, frost_free_days=args.frost_free_days)
    return FitContext(
        plant_name=args.plant,
        location=Location(lat=args.lat, lon=args.lon, address=args.address),
        orientation=args.orientation,
        climate=climate,
        cell=CellPosition(x=args.x, y=args.y, sunlight_hours=args.sunlight_hours),
        weather_monthly=weather,
    )


def _print_fit(plant: str, result: FitResult) -> None:
    table = Table(title=f"Fit for {plant}", border_style="#16a34a")
    table.add_column("Metric")
    table.add_column("Score", justify="right")
    for label, score in (
        ("Sunlight", result.sunlight_score),
        ("Humidity", result.humidity_score),
        ("Precipitation", result.precip_score),
        ("Temperature", result.temperature_score),
        ("Overall", result.overall_score),
    ):
        style = _score_style(score)
        table.add_row(label, f"[{style}]{score}/5[/{style}]")
    out.print(table)
    out.print(Panel(result.explanation, title="Explanation", border_style="#16a34a"))


async def run_check(client: OpenRouterClient) -> int:
    status = await client.test_connection()
    if status.success:
        out.print(f"[score.good]Connection OK[/score.good] (model: {status.model})")
        return 0
    out.print(f"[score.bad]Connection failed:[/score.bad] {status.error}")
    return 1


async def run_search(client: OpenRouterClient, query: str) -> int:
    candidates = await client.search_plants(query)
    table = Table(title=f"Candidates for \"{query}\"", border_style="#16a34a")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Latin name", style="italic")
    for i, c in enumerate(candidates, start=1):
        table.add_row(str(i), c.name, c.latin_name or "—")
    out.print(table)
    return 0


async def run_fit(client: OpenRouterClient, context: FitContext) -> int:
    result = await client.check_plant_fit(context)
    _print_fit(context.plant_name, result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Plant advisor (OpenRouter)")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("check", help="Test the connection to OpenRouter")

    se = sub.add_parser("search", help="Find plants matching a name")
    se.add_argument("query", help="Plant name (Polish, English or Latin)")

    fit = sub.add_parser("fit", help="Score how well a plant fits a plot cell")
    fit.add_argument("plant", help="Plant name")
    fit.add_argument("--lat", type=float, required=True, help="Latitude")
    fit.add_argument("--lon", type=float, required=True, help="Longitude")
    fit.add_argument("--orientation", type=int, default=0, help="Plot orientation in degrees (0 = north)")
    fit.add_argument("--weather", help="JSON file with monthly weather (list of {month, temperature, sunlight, humidity, precip})")
    fit.add_argument("--x", type=int, default=0, help="Cell column (0-based)")
    fit.add_argument("--y", type=int, default=0, help="Cell row (0-based)")
    fit.add_argument("--sunlight-hours", type=float, default=None, help="Estimated sunlight hours per day")
    fit.add_argument("--zone", default=None, help="Climate zone label")
    fit.add_argument("--address", default=None, help="Address of the plot")
    fit.add_argument("--frost-free-days", type=int, default=None, help="Frost-free days per year")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2

    settings = get_settings()
    configure_logging(settings.observability.log_level)
    obs_metrics.start_server(settings.observability.metrics_port)

    try:
        client = OpenRouterClient(ClientConfig.from_settings(settings.openrouter))
        if args.command == "check":
            return asyncio.run(run_check(client))
        if args.command == "search":
            return asyncio.run(run_search(client, args.query))
        return asyncio.run(run_fit(client, build_fit_context(args)))
    except OpenRouterError as e:
        out.print(f"[score.bad][{e.code}][/score.bad] {e.message}")
        if e.retry_after is not None:
            out.print(f"Try again in {e.retry_after}s")
        return 1
    except (ValueError, ValidationError, OSError) as e:
        out.print(f"[score.bad]Error:[/score.bad] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
