"""Output helpers: JSON-ready dicts and rich tables for computed charts and events."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping

from .geometry import format_degree
from .models import (
    AspectMatch,
    AspectSet,
    Chart,
    EventKind,
    EventRecord,
    HouseCusps,
    PeriodDay,
    Position,
    ProgressedChart,
    SignificantEvents,
    SolarReturnChart,
)

PLANET_SYMBOLS = {
    "Sun": "☉",
    "Moon": "☽",
    "Mercury": "☿",
    "Venus": "♀",
    "Mars": "♂",
    "Jupiter": "♃",
    "Saturn": "♄",
    "Uranus": "♅",
    "Neptune": "♆",
    "Pluto": "♇",
    "NNode": "☊",
    "SNode": "☋",
    "Chiron": "⚷",
    "Lilith": "⚸",
}

SIGN_SYMBOLS = {
    "Aries": "♈",
    "Taurus": "♉",
    "Gemini": "♊",
    "Cancer": "♋",
    "Leo": "♌",
    "Virgo": "♍",
    "Libra": "♎",
    "Scorpio": "♏",
    "Sagittarius": "♐",
    "Capricorn": "♑",
    "Aquarius": "♒",
    "Pisces": "♓",
}


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def position_to_dict(p: Position) -> Dict[str, Any]:
    return {
        "name": p.name,
        "longitude": p.longitude,
        "speed": p.speed,
        "sign": p.sign,
        "degree_in_sign": p.degree_in_sign,
        "formatted": f"{format_degree(p.longitude)} {p.sign}",
        "retrograde": p.retrograde,
        "house": p.house,
    }


def houses_to_dict(houses: HouseCusps) -> Dict[str, Any]:
    return {
        "cusps": list(houses.cusps),
        "angles": houses.angles(),
    }


def aspect_to_dict(a: AspectMatch) -> Dict[str, Any]:
    return {
        "body_a": a.body_a,
        "body_b": a.body_b,
        "aspect": a.aspect,
        "angle": a.target_angle,
        "orb": a.orb,
        "exactness": round(a.exactness, 1),
        "applying": a.applying,
        "peak_moment": _iso(a.peak_moment),
    }


def aspect_set_to_dict(aspect_set: AspectSet) -> Dict[str, Any]:
    s = aspect_set.summary
    return {
        "aspects": [aspect_to_dict(a) for a in aspect_set.aspects],
        "summary": {
            "total": s.total,
            "applying": s.applying,
            "separating": s.separating,
            "exact": s.exact,
            "by_aspect": dict(s.by_aspect),
            "by_body_a": dict(s.by_body_a),
            "by_body_b": dict(s.by_body_b),
        },
    }


def event_to_dict(event: EventRecord) -> Dict[str, Any]:
    return {
        "kind": event.kind.value,
        "body": event.body,
        "from": event.from_state,
        "to": event.to_state,
        "exact_moment": _iso(event.exact_moment),
        "description": describe_event(event),
    }


def events_to_dict(events: SignificantEvents) -> Dict[str, Any]:
    return {
        "sign_changes": [event_to_dict(e) for e in events.sign_changes],
        "phase_changes": [event_to_dict(e) for e in events.phase_changes],
        "retrograde_changes": [event_to_dict(e) for e in events.retrograde_changes],
        "failed_bodies": list(events.failed_bodies),
    }


def _positions_to_list(positions: Mapping[str, Position]) -> List[Dict[str, Any]]:
    return [position_to_dict(p) for p in positions.values()]


def chart_to_dict(chart: Chart) -> Dict[str, Any]:
    return {
        "name": chart.input.name,
        "datetime_utc": _iso(chart.input.datetime_utc),
        "latitude": chart.input.latitude,
        "longitude": chart.input.longitude,
        "house_system": chart.input.house_system,
        "positions": _positions_to_list(chart.positions),
        "houses": houses_to_dict(chart.houses),
        "aspects": aspect_set_to_dict(chart.aspects),
    }


def progressed_to_dict(chart: ProgressedChart) -> Dict[str, Any]:
    return {
        "age_years": chart.age_years,
        "progressed_instant": _iso(chart.progressed_instant),
        "house_method": chart.house_method.value,
        "positions": _positions_to_list(chart.positions),
        "houses": houses_to_dict(chart.houses),
        "to_natal": aspect_set_to_dict(chart.to_natal),
        "to_progressed": aspect_set_to_dict(chart.to_progressed),
    }


def solar_return_to_dict(sr: SolarReturnChart) -> Dict[str, Any]:
    return {
        "year": sr.year,
        "moment": _iso(sr.solution.moment),
        "natal_sun_longitude": sr.natal_sun_longitude,
        "residual": sr.solution.residual,
        "converged": sr.solution.converged,
        "chart": chart_to_dict(sr.chart),
    }


def period_to_dict(days: Iterable[PeriodDay]) -> List[Dict[str, Any]]:
    out = []
    for day in days:
        out.append(
            {
                "date": _iso(day.instant),
                "moon_phase": {"name": day.moon_phase.name, "age_days": day.moon_phase.age_days},
                "positions": _positions_to_list(day.positions),
                "aspects": aspect_set_to_dict(day.aspects),
                "events": events_to_dict(day.events) if day.events is not None else None,
            }
        )
    return out


def describe_event(event: EventRecord) -> str:
    if event.kind is EventKind.SIGN_CHANGE:
        return f"{event.body} enters {event.to_state}"
    if event.kind is EventKind.PHASE_CHANGE:
        return f"Moon phase: {event.to_state}"
    if event.kind is EventKind.RETROGRADE_STATION:
        return f"{event.body} becomes {event.to_state}"
    return f"{event.body} returns to its {event.from_state} longitude in {event.to_state}"


def _planet_label(name: str) -> str:
    symbol = PLANET_SYMBOLS.get(name)
    return f"{symbol} {name}" if symbol else name


def _sign_label(sign: str, use_symbol: bool = True) -> str:
    """Return a sign label, optionally prefixed with its symbol."""
    if not use_symbol:
        return sign
    symbol = SIGN_SYMBOLS.get(sign)
    return f"{symbol} {sign}" if symbol else sign


def _format_position(p: Position, use_symbol: bool = True) -> str:
    return f"{format_degree(p.longitude)} {_sign_label(p.sign, use_symbol)}"


def _format_moment(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC") if value is not None else "—"


def render_positions(console, positions: Mapping[str, Position], title: str = "Positions") -> None:
    from rich import box
    from rich.table import Table

    table = Table(title=title, box=box.ROUNDED, expand=False, padding=(0, 1))
    table.add_column("Body", style="cyan", no_wrap=True)
    table.add_column("Position", style="magenta", no_wrap=True, justify="right")
    table.add_column("House", justify="center", no_wrap=True)
    table.add_column("Speed", justify="right", no_wrap=True)

    for p in positions.values():
        speed = f"{p.speed:+.4f}°/d"
        if p.retrograde:
            speed = f"[bold red]{speed} R[/]"
        table.add_row(
            _planet_label(p.name),
            _format_position(p),
            str(p.house) if p.house is not None else "—",
            speed,
        )
    console.print(table)


def render_houses(console, houses: HouseCusps, title: str = "Houses") -> None:
    from rich import box
    from rich.table import Table

    table = Table(title=title, box=box.MINIMAL_DOUBLE_HEAD, expand=False, padding=(0, 1))
    table.add_column("House", justify="center", no_wrap=True)
    table.add_column("Cusp", style="magenta", no_wrap=True, justify="right")
    for idx, cusp in enumerate(houses.cusps, start=1):
        table.add_row(str(idx), _format_position(Position(str(idx), cusp)))
    for name, lon in houses.angles().items():
        table.add_row(f"[bold]{name}[/]", _format_position(Position(name, lon)))
    console.print(table)


def render_aspects(console, aspect_set: AspectSet, title: str = "Aspects (by orb)") -> None:
    from rich import box
    from rich.table import Table
    from rich.text import Text

    table = Table(title=title, box=box.SIMPLE, expand=False, padding=(0, 1))
    table.add_column("Pair", style="cyan", overflow="fold", max_width=36)
    table.add_column("Aspect", justify="center", no_wrap=True)
    table.add_column("Orb", justify="right", style="green", no_wrap=True)
    table.add_column("Status", style="yellow", no_wrap=True)
    table.add_column("Peak", style="magenta", no_wrap=True)

    if not aspect_set.aspects:
        table.add_row("—", "None", "—", "—", "—")
    for a in aspect_set.aspects:
        orb_text = Text(f"{a.orb:.2f}°")
        if a.orb < 0.5:
            orb_text.stylize("bold white on red")
        status = "[bold green]applying[/]" if a.applying else "[dim]separating[/]"
        table.add_row(
            f"{_planet_label(a.body_a)} - {_planet_label(a.body_b)}",
            a.aspect.capitalize(),
            orb_text,
            Text.from_markup(status),
            _format_moment(a.peak_moment) if a.peak_moment else "",
        )
    console.print(table)

    s = aspect_set.summary
    console.print(
        f"[dim]{s.total} aspects: {s.applying} applying, {s.separating} separating, {s.exact} exact[/]"
    )


def render_events(console, events: SignificantEvents, title: str = "Events") -> None:
    from rich import box
    from rich.table import Table

    table = Table(title=title, box=box.SIMPLE, expand=False, padding=(0, 1))
    table.add_column("When", style="green", no_wrap=True)
    table.add_column("Event", style="cyan")
    records = sorted(
        events.all(), key=lambda e: (e.exact_moment is None, e.exact_moment or datetime.max)
    )
    if not records:
        table.add_row("—", "No events")
    for event in records:
        table.add_row(_format_moment(event.exact_moment), describe_event(event))
    console.print(table)
    if events.failed_bodies:
        console.print(f"[yellow]Skipped: {', '.join(events.failed_bodies)}[/]")


def render_period(console, days: Iterable[PeriodDay]) -> None:
    for day in days:
        console.print(
            f"[bold cyan]{day.instant.strftime('%Y-%m-%d')}[/]  "
            f"{day.moon_phase.name} ({day.moon_phase.age_days:.1f} d)"
        )
        render_aspects(console, day.aspects, title="Transits")
        if day.events is not None and day.events.all():
            render_events(console, day.events)
        console.print()
