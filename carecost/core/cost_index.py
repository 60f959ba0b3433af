"""Geographic healthcare cost index tables and location resolver.

Indices follow the CMS Geographic Adjustment Factor convention: 1.0 is the
national average and higher values are more expensive markets. The tables are
built once at import and exposed as read-only mappings, so they can be shared
between worker threads without locking.

Resolution is a strict hierarchy: a ZIP prefix that maps to a known metro
area wins, then the state average, then the national default of 1.0.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import pandas as pd

from ..models.location import CostTier, CostVarianceEstimate, MetroCostEntry, StateCostSummary
from ..utils.numbers import round_half_up

LOGGER = logging.getLogger(__name__)

NATIONAL_AVERAGE_INDEX = 1.0
ZIP_PREFIX_LENGTH = 3

VH, H, A, L, VL = (
    CostTier.VERY_HIGH,
    CostTier.HIGH,
    CostTier.AVERAGE,
    CostTier.LOW,
    CostTier.VERY_LOW,
)

# state, name, average, min, max, tier
_STATE_ROWS: List[Tuple[str, str, float, float, float, CostTier]] = [
    ("AK", "Alaska", 1.27, 1.22, 1.32, VH),
    ("CA", "California", 1.18, 0.98, 1.45, VH),
    ("CT", "Connecticut", 1.15, 1.08, 1.22, VH),
    ("DC", "District of Columbia", 1.21, 1.21, 1.21, VH),
    ("HI", "Hawaii", 1.12, 1.08, 1.16, VH),
    ("MA", "Massachusetts", 1.14, 1.05, 1.23, VH),
    ("NJ", "New Jersey", 1.13, 1.05, 1.21, VH),
    ("NY", "New York", 1.12, 0.96, 1.35, VH),
    ("CO", "Colorado", 1.05, 0.95, 1.15, H),
    ("DE", "Delaware", 1.06, 1.04, 1.08, H),
    ("FL", "Florida", 1.02, 0.94, 1.12, H),
    ("IL", "Illinois", 1.04, 0.92, 1.18, H),
    ("MD", "Maryland", 1.08, 1.02, 1.14, H),
    ("MN", "Minnesota", 1.03, 0.94, 1.12, H),
    ("NH", "New Hampshire", 1.06, 1.02, 1.10, H),
    ("OR", "Oregon", 1.03, 0.96, 1.10, H),
    ("PA", "Pennsylvania", 1.02, 0.94, 1.12, H),
    ("RI", "Rhode Island", 1.08, 1.06, 1.10, H),
    ("TX", "Texas", 1.01, 0.92, 1.12, H),
    ("VA", "Virginia", 1.03, 0.94, 1.15, H),
    ("WA", "Washington", 1.05, 0.96, 1.15, H),
    ("AZ", "Arizona", 0.99, 0.94, 1.05, A),
    ("GA", "Georgia", 0.98, 0.92, 1.06, A),
    ("MI", "Michigan", 0.99, 0.92, 1.08, A),
    ("NC", "North Carolina", 0.97, 0.92, 1.04, A),
    ("NV", "Nevada", 1.00, 0.96, 1.05, A),
    ("OH", "Ohio", 0.97, 0.90, 1.05, A),
    ("SC", "South Carolina", 0.96, 0.92, 1.02, A),
    ("TN", "Tennessee", 0.96, 0.90, 1.04, A),
    ("UT", "Utah", 0.98, 0.94, 1.02, A),
    ("VT", "Vermont", 1.00, 0.98, 1.02, A),
    ("WI", "Wisconsin", 0.98, 0.92, 1.06, A),
    ("AL", "Alabama", 0.92, 0.88, 0.98, L),
    ("AR", "Arkansas", 0.90, 0.86, 0.94, L),
    ("IA", "Iowa", 0.93, 0.88, 0.98, L),
    ("ID", "Idaho", 0.94, 0.90, 0.98, L),
    ("IN", "Indiana", 0.94, 0.88, 1.00, L),
    ("KS", "Kansas", 0.93, 0.88, 0.98, L),
    ("KY", "Kentucky", 0.92, 0.86, 0.98, L),
    ("LA", "Louisiana", 0.93, 0.88, 0.98, L),
    ("ME", "Maine", 0.95, 0.92, 0.98, L),
    ("MO", "Missouri", 0.93, 0.86, 1.02, L),
    ("MT", "Montana", 0.94, 0.90, 0.98, L),
    ("NE", "Nebraska", 0.93, 0.88, 0.98, L),
    ("NM", "New Mexico", 0.94, 0.90, 0.98, L),
    ("ND", "North Dakota", 0.93, 0.90, 0.96, L),
    ("OK", "Oklahoma", 0.92, 0.88, 0.98, L),
    ("SD", "South Dakota", 0.92, 0.88, 0.96, L),
    ("WY", "Wyoming", 0.95, 0.92, 0.98, L),
    ("MS", "Mississippi", 0.88, 0.84, 0.92, VL),
    ("PR", "Puerto Rico", 0.85, 0.82, 0.88, VL),
    ("WV", "West Virginia", 0.89, 0.86, 0.92, VL),
]

# name, fips, county, state, cost index, work GPCI, PE GPCI, MP GPCI, wage index, tier, ZIP-3 prefixes
_METRO_ROWS: List[Tuple[str, str, str, str, float, float, float, float, float, CostTier, Tuple[str, ...]]] = [
    ("San Francisco-Oakland-Berkeley, CA", "06075", "San Francisco", "CA",
     1.45, 1.08, 1.52, 0.85, 1.48, VH, ("940", "941", "944")),
    ("San Jose-Sunnyvale-Santa Clara, CA", "06085", "Santa Clara", "CA",
     1.42, 1.06, 1.48, 0.88, 1.45, VH, ("950", "951")),
    ("New York-Newark-Jersey City, NY-NJ-PA", "36061", "New York (Manhattan)", "NY",
     1.35, 1.05, 1.42, 1.02, 1.38, VH, ("100", "101", "102", "103", "104")),
    ("Los Angeles-Long Beach-Anaheim, CA", "06037", "Los Angeles", "CA",
     1.28, 1.04, 1.35, 0.92, 1.30, VH, ("900", "901", "902", "903", "904", "905", "906", "907", "908")),
    ("Boston-Cambridge-Newton, MA-NH", "25025", "Suffolk", "MA",
     1.23, 1.04, 1.28, 0.85, 1.25, VH, ("021", "022")),
    ("Seattle-Tacoma-Bellevue, WA", "53033", "King", "WA",
     1.15, 1.02, 1.18, 0.85, 1.16, H, ("980", "981")),
    ("Washington-Arlington-Alexandria, DC-VA-MD-WV", "11001", "District of Columbia", "DC",
     1.21, 1.04, 1.25, 0.88, 1.22, VH, ("200", "201", "202")),
    ("Chicago-Naperville-Elgin, IL-IN-WI", "17031", "Cook", "IL",
     1.10, 1.02, 1.12, 1.05, 1.08, H, ("606", "607")),
    ("Miami-Fort Lauderdale-Pompano Beach, FL", "12086", "Miami-Dade", "FL",
     1.08, 1.00, 1.12, 1.38, 1.05, H, ("331", "332", "333")),
    ("Denver-Aurora-Lakewood, CO", "08031", "Denver", "CO",
     1.08, 1.02, 1.10, 0.85, 1.06, H, ("802", "803")),
    ("Phoenix-Mesa-Chandler, AZ", "04013", "Maricopa", "AZ",
     1.02, 1.00, 1.02, 0.95, 1.00, A, ("850", "851", "852")),
    ("Atlanta-Sandy Springs-Alpharetta, GA", "13121", "Fulton", "GA",
     1.02, 1.00, 1.04, 0.92, 1.02, A, ("303", "304", "305")),
    ("Dallas-Fort Worth-Arlington, TX", "48113", "Dallas", "TX",
     1.04, 1.01, 1.05, 0.98, 1.02, H, ("750", "751", "752", "753")),
    ("Houston-The Woodlands-Sugar Land, TX", "48201", "Harris", "TX",
     1.05, 1.01, 1.06, 1.02, 1.04, H, ("770", "771", "772", "773", "774", "775")),
]


def _build_state_table() -> Mapping[str, StateCostSummary]:
    table: Dict[str, StateCostSummary] = {}
    for state, name, average, low, high, tier in _STATE_ROWS:
        table[state] = StateCostSummary(
            state=state,
            state_name=name,
            average_cost_index=average,
            min_cost_index=low,
            max_cost_index=high,
            tier=tier,
        )
    return MappingProxyType(table)


def _build_metro_tables() -> Tuple[Mapping[str, MetroCostEntry], Mapping[str, str]]:
    metros: Dict[str, MetroCostEntry] = {}
    zip_prefixes: Dict[str, str] = {}
    for name, fips, county, state, index, work, pe, mp, wage, tier, prefixes in _METRO_ROWS:
        metros[name] = MetroCostEntry(
            name=name,
            fips=fips,
            county=county,
            state=state,
            cost_index=index,
            work_gpci=work,
            pe_gpci=pe,
            mp_gpci=mp,
            wage_index=wage,
            tier=tier,
        )
        for prefix in prefixes:
            zip_prefixes[prefix] = name
    return MappingProxyType(metros), MappingProxyType(zip_prefixes)


STATE_COST_INDICES: Mapping[str, StateCostSummary] = _build_state_table()
METRO_AREA_INDICES, ZIP_PREFIX_TO_METRO = _build_metro_tables()

TIER_DESCRIPTIONS: Mapping[CostTier, str] = MappingProxyType(
    {
        CostTier.VERY_LOW: "Very Low Cost (15%+ below average)",
        CostTier.LOW: "Below Average Cost (5-15% below average)",
        CostTier.AVERAGE: "Average Cost (within 5% of average)",
        CostTier.HIGH: "Above Average Cost (5-15% above average)",
        CostTier.VERY_HIGH: "Very High Cost (15%+ above average)",
    }
)


# ---------------------------------------------------------------- lookups
def get_state_cost_index(state_code: Optional[str]) -> Optional[StateCostSummary]:
    """Return the state summary for ``state_code`` (case-insensitive)."""
    if not state_code:
        return None
    return STATE_COST_INDICES.get(state_code.strip().upper())


def get_metro_cost_index(metro_name: str) -> Optional[MetroCostEntry]:
    """Find a metro entry by exact name, then by case-insensitive substring."""
    if metro_name in METRO_AREA_INDICES:
        return METRO_AREA_INDICES[metro_name]
    needle = metro_name.strip().lower()
    if not needle:
        return None
    for name, entry in METRO_AREA_INDICES.items():
        candidate = name.lower()
        if needle in candidate or candidate in needle:
            return entry
    return None


def find_metro_by_zip(zip_code: Optional[str]) -> Optional[MetroCostEntry]:
    """Return the metro area whose ZIP-3 prefix matches ``zip_code``."""
    if not zip_code:
        return None
    prefix = str(zip_code).strip()[:ZIP_PREFIX_LENGTH]
    metro_name = ZIP_PREFIX_TO_METRO.get(prefix)
    if metro_name is None:
        return None
    return METRO_AREA_INDICES.get(metro_name)


def get_cost_adjustment_factor(state_code: Optional[str], zip_code: Optional[str] = None) -> float:
    """Resolve the multiplicative cost factor for a location.

    Order: ZIP-prefix metro match, then state average, then 1.0.
    """
    metro = find_metro_by_zip(zip_code)
    if metro is not None:
        return metro.cost_index

    state = get_state_cost_index(state_code)
    if state is not None:
        return state.average_cost_index

    LOGGER.debug(
        "No cost index for state=%r zip=%r; using national average.", state_code, zip_code
    )
    return NATIONAL_AVERAGE_INDEX


def adjust_cost_for_location(
    base_cost: float, state_code: Optional[str], zip_code: Optional[str] = None
) -> int:
    """Scale ``base_cost`` by the location factor, rounded to whole dollars."""
    return round_half_up(base_cost * get_cost_adjustment_factor(state_code, zip_code))


# ------------------------------------------------------------------ tiers
def tier_for_multiplier(factor: float) -> CostTier:
    if factor >= 1.15:
        return CostTier.VERY_HIGH
    if factor >= 1.05:
        return CostTier.HIGH
    if factor >= 0.95:
        return CostTier.AVERAGE
    if factor >= 0.85:
        return CostTier.LOW
    return CostTier.VERY_LOW


def tier_description(tier: CostTier | str) -> str:
    return TIER_DESCRIPTIONS[CostTier(tier)]


# -------------------------------------------------------------- summaries
def states_by_expense(ascending: bool = True) -> List[StateCostSummary]:
    """Return all state summaries ordered by average cost index."""
    return sorted(
        STATE_COST_INDICES.values(),
        key=lambda summary: summary.average_cost_index,
        reverse=not ascending,
    )


def state_cost_frame(ascending: bool = True) -> pd.DataFrame:
    """Tabular view of the state index table."""
    rows = [
        {
            "state": summary.state,
            "state_name": summary.state_name,
            "average_cost_index": summary.average_cost_index,
            "min_cost_index": summary.min_cost_index,
            "max_cost_index": summary.max_cost_index,
            "tier": summary.tier.value,
        }
        for summary in states_by_expense(ascending)
    ]
    return pd.DataFrame(rows)


def estimate_annual_cost_variance(
    national_average_cost: float,
    state_code: Optional[str],
    zip_code: Optional[str] = None,
) -> CostVarianceEstimate:
    """Describe how far a location moves a national-average annual cost."""
    factor = get_cost_adjustment_factor(state_code, zip_code)
    adjusted_cost = round_half_up(national_average_cost * factor)
    return CostVarianceEstimate(
        adjusted_cost=adjusted_cost,
        variance=adjusted_cost - national_average_cost,
        percentage_change=round_half_up((factor - 1.0) * 100.0),
        multiplier=factor,
        tier=tier_for_multiplier(factor),
    )


__all__ = [
    "NATIONAL_AVERAGE_INDEX",
    "STATE_COST_INDICES",
    "METRO_AREA_INDICES",
    "ZIP_PREFIX_TO_METRO",
    "TIER_DESCRIPTIONS",
    "get_state_cost_index",
    "get_metro_cost_index",
    "find_metro_by_zip",
    "get_cost_adjustment_factor",
    "adjust_cost_for_location",
    "tier_for_multiplier",
    "tier_description",
    "states_by_expense",
    "state_cost_frame",
    "estimate_annual_cost_variance",
]
