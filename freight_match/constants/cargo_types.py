"""
Cargo Classifications

FMCSA cargo classification codes (Motor Carrier Identification Report,
section 24). Loads carry exactly one code; carriers carry a set of them.

The upstream cargo-carried lookup reports either the numeric class id or a
free-text description; descriptions are translated through
CARGO_DESCRIPTION_TO_CODE, which also lists the alternate spellings seen
in FMCSA responses.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# ============================================================================
# Code Table
# ============================================================================

CARGO_TYPES: Dict[int, str] = {
    1: "GENERAL FREIGHT",
    2: "HOUSEHOLD GOODS",
    3: "METAL SHEETS; COILS, ROLLS",
    4: "MOTOR VEHICLES",
    5: "DRIVE AWAY/TOWAWAY",
    6: "LOGS, POLES",
    7: "BUILDING MATERIALS",
    8: "MOBILE HOMES",
    9: "MACHINERY, LARGE OBJECTS",
    10: "FRESH PRODUCE",
    11: "LIQUIDS/GASES",
    12: "INTERMODAL CONT.",
    13: "PASSENGERS",
    14: "OIL FIELD EQUIPMENT",
    15: "LIVESTOCK",
    16: "GRAIN, FEED, HAY",
    17: "COAL/COKE",
    18: "MEAT",
    19: "GARBAGE, REFUSE, TRASH",
    20: "U.S. MAIL",
    21: "CHEMICALS",
    22: "COMMODITIES DRY BULK",
    23: "REFRIGERATED FOOD",
    24: "BEVERAGES",
    25: "PAPER PRODUCTS",
    26: "UTILITY",
    27: "FARM SUPPLIES",
    28: "CONSTRUCTION",
    29: "WATER WELL",
    30: "OTHER",
}

MIN_CARGO_CODE = 1
MAX_CARGO_CODE = 30

# Canonical names plus alternate formats returned by the API
CARGO_DESCRIPTION_TO_CODE: Dict[str, int] = {
    **{name: code for code, name in CARGO_TYPES.items()},
    "METAL: SHEETS, COILS, ROLLS": 3,
    "DRIVE-AWAY/TOW-AWAY": 5,
    "LOGS, POLES, BEAMS, LUMBER": 6,
    "INTERMODAL CONTAINERS": 12,
    "OILFIELD EQUIPMENT": 14,
    "US MAIL": 20,
}


# ============================================================================
# Helpers
# ============================================================================

def is_valid_cargo_code(code: Any) -> bool:
    """True if code is an int in the 1..30 enumeration (bools excluded)."""
    return isinstance(code, int) and not isinstance(code, bool) and MIN_CARGO_CODE <= code <= MAX_CARGO_CODE


def get_cargo_type_name(code: int) -> Optional[str]:
    """Classification name for a cargo code, None outside the table."""
    return CARGO_TYPES.get(code)


def cargo_code_from_description(description: str) -> Optional[int]:
    """
    Translate an FMCSA cargo description to its code.

    Matching is case-insensitive and ignores surrounding whitespace.
    Returns None for descriptions not in the table.
    """
    if not description:
        return None
    return CARGO_DESCRIPTION_TO_CODE.get(description.strip().upper())


def cargo_code_from_item(item: Dict[str, Any]) -> Optional[int]:
    """
    Extract a cargo code from one cargo-carried record.

    Prefers the numeric id.cargoClassId; falls back to translating
    cargoClassDesc. Untranslatable or out-of-range entries yield None and
    are logged at WARNING.
    """
    raw_id = (item.get("id") or {}).get("cargoClassId")
    if raw_id is not None:
        try:
            code = int(raw_id)
        except (TypeError, ValueError):
            code = None
        if code is not None and is_valid_cargo_code(code):
            return code
        logger.warning(f"Ignoring out-of-range cargo class id: {raw_id!r}")

    description = item.get("cargoClassDesc")
    if description:
        code = cargo_code_from_description(description)
        if code is None:
            logger.warning(f"Unknown cargo type description: {description}")
        return code

    return None
