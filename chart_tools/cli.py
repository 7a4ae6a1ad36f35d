"""Command line entry point: chart-tools <command> ..."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Sequence

from . import astro_engine, output
from .charts import natal_chart, progressed_chart, solar_return_chart, synastry_aspects, transit_aspects
from .errors import ChartToolsError
from .events import find_significant_events
from .models import ChartInput, HouseMethod
from .period import scan_period

logger = logging.getLogger(__name__)


def parse_dt(value: str) -> datetime:
    """Return a UTC datetime from an ISO-like string, lenient on 1-digit month/day."""

    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"

    def try_parse(fmt: str) -> datetime | None:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            return None

    try:
        dt = datetime.fromisoformat(raw)
    except ValueError:
        dt = (
            try_parse("%Y-%m-%dT%H:%M:%S%z")
            or try_parse("%Y-%m-%dT%H:%M:%S.%f%z")
            or try_parse("%Y-%m-%d %H:%M:%S%z")
            or try_parse("%Y-%m-%d %H:%M:%S.%f%z")
            or try_parse("%Y-%m-%dT%H:%M:%S")
            or try_parse("%Y-%m-%dT%H:%M:%S.%f")
            or try_parse("%Y-%m-%d %H:%M:%S")
            or try_parse("%Y-%m-%d %H:%M")
            or try_parse("%Y-%m-%d")
        )
        if dt is None:
            raise argparse.ArgumentTypeError(f"not a datetime: {value!r}") from None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _add_birth_args(parser: argparse.ArgumentParser, suffix: str = "") -> None:
    parser.add_argument(f"--birth{suffix}", required=True, type=parse_dt, help="Birth datetime (ISO, UTC if no offset).")
    parser.add_argument(f"--lat{suffix}", required=True, type=float, help="Latitude in decimal degrees.")
    parser.add_argument(f"--lon{suffix}", required=True, type=float, help="Longitude in decimal degrees (east positive).")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chart-tools", description="Aspects, houses and timed events.")
    parser.add_argument("--ephe", help="Swiss Ephemeris directory. Defaults to the SWISSEPH_EPHE env var.")
    parser.add_argument("--house-system", default="P", help="House system code or name (default: P, Placidus).")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of tables.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output.")
    sub = parser.add_subparsers(dest="command", required=True)

    natal = sub.add_parser("natal", help="Positions, houses and aspects of one chart.")
    _add_birth_args(natal)
    natal.add_argument("--compat", action="store_true", help="Apply the sign compatibility filter.")
    natal.add_argument("--closest", action="store_true", help="Pick the closest aspect instead of the first match.")

    transits = sub.add_parser("transits", help="Transits to a natal chart at a date.")
    _add_birth_args(transits)
    transits.add_argument("--date", type=parse_dt, help="Transit datetime (default: now).")

    scan = sub.add_parser("scan", help="Day-by-day transits and events over a range.")
    _add_birth_args(scan)
    scan.add_argument("--start", required=True, type=parse_dt, help="Start datetime.")
    scan.add_argument("--end", required=True, type=parse_dt, help="End datetime.")
    scan.add_argument("--max-orb", type=float, default=1.0, help="Largest orb to list (default: 1).")

    events = sub.add_parser("events", help="Ingresses, lunar phase changes and stations in a window.")
    events.add_argument("--start", required=True, type=parse_dt, help="Start datetime.")
    events.add_argument("--end", required=True, type=parse_dt, help="End datetime.")

    progressed = sub.add_parser("progressed", help="Secondary progressions for a date.")
    _add_birth_args(progressed)
    progressed.add_argument("--date", type=parse_dt, help="Target datetime (default: now).")
    progressed.add_argument(
        "--house-method",
        choices=[m.value for m in HouseMethod],
        default=HouseMethod.SECONDARY.value,
    )

    solar = sub.add_parser("solar-return", help="Solar return chart for a year.")
    _add_birth_args(solar)
    solar.add_argument("--year", required=True, type=int)
    solar.add_argument("--at-lat", type=float, help="Latitude of the return chart (default: birth place).")
    solar.add_argument("--at-lon", type=float, help="Longitude of the return chart (default: birth place).")

    synastry = sub.add_parser("synastry", help="Aspects between two charts.")
    _add_birth_args(synastry)
    _add_birth_args(synastry, suffix="-b")
    return parser


def _chart_input(name: str, birth: datetime, lat: float, lon: float, house_system: str) -> ChartInput:
    return ChartInput(name=name, datetime_utc=birth, latitude=lat, longitude=lon, house_system=house_system)


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def run(args: argparse.Namespace) -> None:
    from rich.console import Console

    console = Console()
    provider = astro_engine.SwissEphemeris(args.ephe)
    now = datetime.now(timezone.utc)

    if args.command == "events":
        if args.end <= args.start:
            raise SystemExit("End datetime must be after start datetime.")
        found = find_significant_events(provider, args.start, args.end)
        if args.json:
            _print_json(output.events_to_dict(found))
        else:
            output.render_events(console, found)
        return

    natal_input = _chart_input("natal", args.birth, args.lat, args.lon, args.house_system)

    if args.command == "natal":
        chart = natal_chart(
            provider,
            natal_input,
            strategy="closest" if args.closest else "first",
            compatibility=args.compat,
        )
        if args.json:
            _print_json(output.chart_to_dict(chart))
            return
        output.render_positions(console, chart.positions)
        output.render_houses(console, chart.houses)
        output.render_aspects(console, chart.aspects)

    elif args.command == "transits":
        natal = natal_chart(provider, natal_input)
        aspects = transit_aspects(provider, natal, args.date or now)
        if args.json:
            _print_json(output.aspect_set_to_dict(aspects))
        else:
            output.render_aspects(console, aspects, title="Transits to natal")

    elif args.command == "scan":
        if args.end <= args.start:
            raise SystemExit("End datetime must be after start datetime.")
        natal = natal_chart(provider, natal_input)
        days = scan_period(provider, natal, args.start, args.end, max_orb=args.max_orb)
        if args.json:
            _print_json(output.period_to_dict(days))
        else:
            output.render_period(console, days)

    elif args.command == "progressed":
        prog = progressed_chart(provider, natal_input, args.date or now, args.house_method)
        if args.json:
            _print_json(output.progressed_to_dict(prog))
            return
        console.print(f"[bold cyan]Age {prog.age_years:.2f}[/] -> {prog.progressed_instant.isoformat()}")
        output.render_positions(console, prog.positions, title="Progressed positions")
        output.render_aspects(console, prog.to_natal, title="Progressed to natal")
        output.render_aspects(console, prog.to_progressed, title="Progressed to progressed")

    elif args.command == "solar-return":
        sr = solar_return_chart(provider, natal_input, args.year, args.at_lat, args.at_lon)
        if args.json:
            _print_json(output.solar_return_to_dict(sr))
            return
        console.print(
            f"[bold cyan]Solar return {sr.year}[/]: {sr.solution.moment.isoformat()} "
            f"(residual {sr.solution.residual:.1e}°)"
        )
        output.render_positions(console, sr.chart.positions)
        output.render_aspects(console, sr.chart.aspects)

    elif args.command == "synastry":
        other = _chart_input("partner", args.birth_b, args.lat_b, args.lon_b, args.house_system)
        aspects = synastry_aspects(natal_chart(provider, natal_input), natal_chart(provider, other))
        if args.json:
            _print_json(output.aspect_set_to_dict(aspects))
        else:
            output.render_aspects(console, aspects, title="Synastry")


def main(argv: Sequence[str] | None = None) -> None:
    from rich.logging import RichHandler

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )
    try:
        run(args)
    except ChartToolsError as exc:
        logger.debug("Command failed", exc_info=True)
        sys.exit(f"Error: {exc}")


if __name__ == "__main__":
    main()
