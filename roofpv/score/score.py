"""System sizing and production estimate for a roof layout.

With panels placed the system size is simply panel count x panel power. Without
panels a rough size is derived from the roof area. Production and savings use a
flat peak-sun-hours model; numbers are rounded the way the designer shows them.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Sequence

from roofpv.layout.models import SolarPanel

PEAK_SUN_HOURS = 4.3
SYSTEM_EFFICIENCY = 0.78
DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365

# Area-only estimate when no panels are placed
USABLE_ROOF_FRACTION = 0.8
ESTIMATE_PANEL_AREA = 1.9  # m^2
ESTIMATE_PANEL_POWER = 0.45  # kW

ASSUMED_RATE = 10.0  # currency per kWh when only the bill is known
MIN_MONTHLY_CONSUMPTION = 200.0  # kWh
MAX_SELF_CONSUMPTION = 0.9
GRID_EXPORT_RATE = 0.8
COST_PER_KW = 60000.0


@dataclass(frozen=True)
class SystemCalculation:
    roof_area: float
    system_size_kw: float
    panel_count: int
    estimated_daily_production: float
    estimated_monthly_production: float
    estimated_yearly_production: float
    monthly_savings: float
    payback_months: int
    electricity_rate: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _round1(x: float) -> float:
    return math.floor(x * 10.0 + 0.5) / 10.0


def _round0(x: float) -> float:
    return float(math.floor(x + 0.5))


def capacity_kw(panels: Sequence[SolarPanel]) -> float:
    return float(sum(p.power for p in panels))


def calculate_system(
    roof_area_m2: float,
    panels: Sequence[SolarPanel] = (),
    monthly_bill: float = 5000.0,
) -> Optional[SystemCalculation]:
    """Size the system and estimate production and savings.

    Args:
        roof_area_m2: total drawn roof area.
        panels: placed panels; when empty the size comes from the roof area.
        monthly_bill: electricity bill per month, used to infer the rate.

    Returns:
        SystemCalculation, or None when there are no panels and no roof area.
    """

    if panels:
        panel_count = len(panels)
        size_kw = capacity_kw(panels)
    else:
        if roof_area_m2 <= 0:
            return None
        usable = roof_area_m2 * USABLE_ROOF_FRACTION
        panel_count = int(math.floor(usable / ESTIMATE_PANEL_AREA))
        size_kw = panel_count * ESTIMATE_PANEL_POWER

    daily = size_kw * PEAK_SUN_HOURS * SYSTEM_EFFICIENCY
    monthly = daily * DAYS_PER_MONTH
    yearly = daily * DAYS_PER_YEAR

    consumption = max(monthly_bill / ASSUMED_RATE, MIN_MONTHLY_CONSUMPTION)
    rate = monthly_bill / consumption
    self_consumption = min(monthly / consumption, MAX_SELF_CONSUMPTION)
    self_consumed = monthly * self_consumption
    exported = monthly * (1.0 - self_consumption)
    savings = self_consumed * rate + exported * rate * GRID_EXPORT_RATE

    cost = size_kw * COST_PER_KW
    payback = int(_round0(cost / savings)) if savings > 0 else 0

    return SystemCalculation(
        roof_area=float(roof_area_m2),
        system_size_kw=_round1(size_kw),
        panel_count=panel_count,
        estimated_daily_production=_round1(daily),
        estimated_monthly_production=_round0(monthly),
        estimated_yearly_production=_round0(yearly),
        monthly_savings=_round0(savings),
        payback_months=payback,
        electricity_rate=math.floor(rate * 100.0 + 0.5) / 100.0,
    )
