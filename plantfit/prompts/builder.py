"""
Builds the system/user message pair for each model task.

Pure functions of their inputs: no I/O, no retry awareness.
"""

from __future__ import annotations

from plantfit.models import FitContext, MonthlyWeather, denormalize_temperature
from plantfit.prompts.templates import (
    PLANT_FIT_MONTH_LINE,
    PLANT_FIT_NO_MONTHLY_DATA,
    PLANT_FIT_SYSTEM_TEMPLATE,
    PLANT_FIT_USER_TEMPLATE,
    PLANT_SEARCH_SYSTEM,
    PLANT_SEARCH_USER_TEMPLATE,
)
from plantfit.validation import sanitize_text

# Growing season (weight 2x) and off season (weight 1x) per hemisphere
_SEASONS = {
    "northern": {
        "growing_season": "April-September",
        "growing_months": "4-9",
        "off_season": "October-March",
        "off_months": "10-3",
    },
    "southern": {
        "growing_season": "October-March",
        "growing_months": "10-3",
        "off_season": "April-September",
        "off_months": "4-9",
    },
}

Message = dict[str, str]


def hemisphere(lat: float) -> str:
    return "southern" if lat < 0 else "northern"


def build_search_messages(query: str) -> list[Message]:
    """System and user messages for a plant search. ``query`` must already be sanitized."""
    return [
        {"role": "system", "content": PLANT_SEARCH_SYSTEM},
        {"role": "user", "content": PLANT_SEARCH_USER_TEMPLATE.format(query=query)},
    ]


def build_fit_system_prompt(lat: float) -> str:
    """Rubric and season weights; the growing season follows the plot's hemisphere."""
    side = hemisphere(lat)
    return PLANT_FIT_SYSTEM_TEMPLATE.format(hemisphere=side, **_SEASONS[side])


def _format_coordinate(value: float, positive: str, negative: str) -> str:
    return f"{abs(value):g}°{positive if value >= 0 else negative}"


def _format_month(m: MonthlyWeather) -> str:
    return PLANT_FIT_MONTH_LINE.format(
        month=m.month,
        temperature=denormalize_temperature(m.temperature),
        sunlight=m.sunlight,
        humidity=m.humidity,
        precip=m.precip,
    )


def build_fit_user_prompt(context: FitContext) -> str:
    """Render every contextual figure of a FitContext in readable units."""
    loc = context.location
    climate = context.climate
    cell = context.cell

    if context.weather_monthly:
        monthly_lines = "\n".join(_format_month(m) for m in context.weather_monthly)
    else:
        monthly_lines = PLANT_FIT_NO_MONTHLY_DATA

    return PLANT_FIT_USER_TEMPLATE.format(
        plant_name=sanitize_text(context.plant_name),
        latitude=_format_coordinate(loc.lat, "N", "S"),
        longitude=_format_coordinate(loc.lon, "E", "W"),
        address_line=f"\n- Address: {sanitize_text(loc.address)}" if loc.address else "",
        zone_line=f"\n- Climate zone: {sanitize_text(climate.zone)}" if climate.zone else "",
        orientation=context.orientation,
        annual_temp_avg=f"{climate.annual_temp_avg:.1f}",
        annual_precip=f"{climate.annual_precip:g}",
        frost_free_line=(
            f"\n- Frost-free days: {climate.frost_free_days}" if climate.frost_free_days is not None else ""
        ),
        cell_x=cell.x + 1,
        cell_y=cell.y + 1,
        sunlight_hours_line=(
            f"\n- Estimated sunlight: {cell.sunlight_hours:g}h/day" if cell.sunlight_hours is not None else ""
        ),
        monthly_lines=monthly_lines,
    )


def build_fit_messages(context: FitContext) -> list[Message]:
    """System and user messages for a fit-scoring request."""
    return [
        {"role": "system", "content": build_fit_system_prompt(context.location.lat)},
        {"role": "user", "content": build_fit_user_prompt(context)},
    ]
