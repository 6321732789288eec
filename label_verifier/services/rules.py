"""Regulatory tables: alcohol tolerances, fill sizes and the health warning.

Values follow 27 CFR parts 4, 5, 7 and 16. Breakpoints are exact and must
not be interpolated.
"""

from types import MappingProxyType

from ..models import BeverageType


# Mandatory health warning statement (27 CFR 16.21)
GOVERNMENT_WARNING_TEXT = (
    "GOVERNMENT WARNING: (1) According to the Surgeon General, women should not "
    "drink alcoholic beverages during pregnancy because of the risk of birth defects. "
    "(2) Consumption of alcoholic beverages impairs your ability to drive a car or "
    "operate machinery, and may cause health problems."
)

GOVERNMENT_WARNING_PREFIX = "GOVERNMENT WARNING:"

# Every one of these must appear in the normalized warning text
GOVERNMENT_WARNING_REQUIRED_PHRASES = (
    "government warning",
    "surgeon general",
    "women should not drink",
    "pregnancy",
    "birth defects",
    "impairs your ability",
    "drive a car",
    "operate machinery",
    "health problems",
)

FL_OZ_TO_ML = 29.5735

# (ABV breakpoint, tolerance at or below breakpoint, tolerance above)
_SPIRITS_TOLERANCE = (50.0, 0.3, 0.15)  # 100 proof
_WINE_TOLERANCE = (14.0, 1.5, 1.0)  # table vs dessert wine
_BEER_TOLERANCE = 0.3
_DEFAULT_TOLERANCE = 0.3

STANDARD_FILL_SIZES_ML = MappingProxyType({
    BeverageType.DISTILLED_SPIRITS: (50, 100, 200, 375, 750, 1000, 1750),
    BeverageType.WINE: (187, 375, 500, 750, 1000, 1500, 3000),
    BeverageType.BEER: (355, 473, 650, 946),  # 12, 16, 22, 32 fl oz
})

FILL_SIZE_TOLERANCE_ML = 5.0


def alcohol_tolerance(beverage_type: BeverageType, abv_percent: float) -> float:
    """Acceptable +/- deviation in percentage points for a declared ABV."""
    if beverage_type == BeverageType.DISTILLED_SPIRITS:
        breakpoint_abv, low, high = _SPIRITS_TOLERANCE
        return high if abv_percent > breakpoint_abv else low
    if beverage_type == BeverageType.WINE:
        breakpoint_abv, low, high = _WINE_TOLERANCE
        return high if abv_percent > breakpoint_abv else low
    if beverage_type == BeverageType.BEER:
        return _BEER_TOLERANCE
    return _DEFAULT_TOLERANCE


def is_standard_fill_size(beverage_type: BeverageType, volume_ml: float) -> bool:
    """True if the volume is within rounding distance of a standard container."""
    sizes = STANDARD_FILL_SIZES_ML.get(beverage_type, ())
    return any(abs(size - volume_ml) < FILL_SIZE_TOLERANCE_ML for size in sizes)

