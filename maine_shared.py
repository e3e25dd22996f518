from __future__ import annotations

import re
from pathlib import Path
from types import MappingProxyType

# ---------------- Paths ----------------
OUTPUT_DIR = Path("./output")

EXPORT_TOOL_NAME = "Maine School Financial Import Tool"

# Windows reserved device names (case-insensitive)
_WINDOWS_RESERVED_NAMES = {
    'con', 'prn', 'aux', 'nul',
    'com1', 'com2', 'com3', 'com4', 'com5', 'com6', 'com7', 'com8', 'com9',
    'lpt1', 'lpt2', 'lpt3', 'lpt4', 'lpt5', 'lpt6', 'lpt7', 'lpt8', 'lpt9'
}

def make_safe_filename(name: str) -> str:
    """
    Convert a district/fiscal-year label to a safe filename component.

    Handles:
    - Windows reserved device names (CON, PRN, AUX, NUL, COM1-9, LPT1-9)
    - Whitespace runs (collapsed to a single underscore)
    - Characters that can't be used in filenames

    Args:
        name: The original label

    Returns:
        A safe filename that won't cause OS-level issues
    """
    if not name:
        return "unnamed"

    safe = re.sub(r"\s+", "_", name.strip())
    for ch in '/\\:*?"<>|':
        safe = safe.replace(ch, "_")
    safe = safe.replace("(", "").replace(")", "")

    # Remove any remaining non-ASCII characters
    safe = safe.encode('ascii', 'ignore').decode('ascii')

    stem = safe.split('.')[0].lower()
    if stem in _WINDOWS_RESERVED_NAMES:
        safe = f"file_{safe}"

    if not safe:
        safe = "unnamed"

    return safe

# ---------------- Report dialects ----------------
DIALECT_HINTS = {
    "auto": None,
    "allocation": "allocation",
    "ed279": "allocation",
    "comparative": "comparative",
    "trio": "comparative",
    "staffing": "staffing",
}

REPORT_TYPE_ALLOCATION = "ED279 - EPS State Funding Calculation"
REPORT_TYPE_COMPARATIVE = "Comparative Financial Statement"
REPORT_TYPE_GENERIC = "Trio Financial Report"
REPORT_TYPE_STAFFING = "Staffing Report"

UNKNOWN = "Unknown"

# Sheet names the Trio comparative export always writes
SHEET_SUMMARY = "Summary"
SHEET_DETAIL = "Detail"

# Classifier keyword sets (lower-case substrings of the first sheet's text)
ALLOCATION_MARKERS = (
    "ed279",
    "essential programs and services",
    "eps allocation",
    "state subsidy",
    "operating allocation",
)
STAFFING_MARKERS = ("fte", "staffing", "position", "employee")

# ---------------- Scanner floors / bounds ----------------
CURRENCY_FLOOR = 1000.0          # ignore column indices and small counts
VALUATION_FLOOR = 1_000_000.0    # adjusted valuation is always in the millions
PUPIL_BOUNDS = (0.0, 50000.0)
RATE_BOUNDS = (0.0, 100.0)       # mil rate and share percentages

# ---------------- Metadata heuristics ----------------
DISTRICT_KEYWORDS = ("school", "district", "rsu", "sad", "csd", "department", "unit")
DISTRICT_MIN_LENGTH = 10
DISTRICT_SCAN_ROWS = 5          # allocation grid
GENERIC_SCAN_ROWS = 10          # generic budget-vs-actual scan
NON_DISTRICT_PREFIXES = ("fy", "cycle", "account", "budget")

STAFFING_HEADER_KEYWORDS = ("position", "fte", "employee")

# ---------------- Account code tables ----------------
ACCOUNT_CODE_PATTERN = re.compile(r"\d{4}-\d{4}-\d{4}-\d{4}-\d{3}")

FUNCTION_NAMES = MappingProxyType({
    "1000": "Instruction",
    "2120": "Guidance Services",
    "2130": "Health Services",
    "2220": "Library/Media Services",
    "2310": "Board of Education",
    "2320": "Executive Administration",
    "2400": "School Administration",
    "2600": "Operations & Maintenance",
    "2700": "Transportation",
    "5100": "Debt Service",
})

# function segment -> FundingCategory value
FUNCTION_TO_CATEGORY = MappingProxyType({
    "1000": "regularInstruction",
    "2120": "studentStaffSupport",
    "2130": "studentStaffSupport",
    "2220": "studentStaffSupport",
    "2310": "systemAdmin",
    "2320": "systemAdmin",
    "2400": "schoolAdmin",
    "2600": "facilitiesMaint",
    "2700": "transportation",
    "5100": "debtService",
})
