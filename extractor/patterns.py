"""
Regular expressions for recovering travel details from ledger text.

Each pattern is written against the kind of text it is applied to:
- Sales narrations: "SALES - MR NAME - DXB/LHE - 94A63T - 06/12/2024"
- Labeled composites: "Ali Khan DXB-LHE PNR54321 2025-08-01"
- Whitespace tokens of a composite that matched nothing else
- Free narration text with no structure at all
"""
import re

from config import SALES_MARKER, TITLE_PREFIXES

# =============================================================================
# Sales narration
# =============================================================================

SALES_DELIMITER = " - "
SALES_MIN_SEGMENTS = 5

SALES_MARKER_UPPER = SALES_MARKER.upper()

# "MR ", "Mrs. ", "MISS " ... at the start of a name
TITLE_PREFIX_PATTERN = re.compile(
    r'^(?:' + '|'.join(TITLE_PREFIXES) + r')\.?\s+',
    re.IGNORECASE,
)

# =============================================================================
# Labeled composite, strictest first
# =============================================================================

# Name, 3-letter route, PNR-prefixed code, ISO date
LABELED_WITH_PNR_PREFIX = re.compile(
    r'^([A-Za-z\s]+?)\s+([A-Z]{3}[/-][A-Z]{3})\s+(PNR\w+)\s+(\d{4}-\d{2}-\d{2})$'
)

# Name, 3-letter route, bare code, ISO date
LABELED_BARE_CODE = re.compile(
    r'^([A-Za-z\s]+?)\s+([A-Z]{3}[/-][A-Z]{3})\s+(\w+)\s+(\d{4}-\d{2}-\d{2})$'
)

# Name, 2-4 letter route, code, anything date-like
LABELED_LOOSE = re.compile(
    r'^([A-Za-z\s]+?)\s+([A-Z]{2,4}[/-][A-Z]{2,4})\s+(\w+)\s+(.+)$'
)

# =============================================================================
# Token scan
# =============================================================================

ROUTE_TOKEN = re.compile(r'^[A-Z]{3}(?:[/-][A-Z]{3}){1,4}$')
PNR_TOKEN = re.compile(r'^(?:PNR)?[A-Za-z0-9]+$')
PNR_TOKEN_MIN_LENGTH = 5
ISO_DATE_TOKEN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
DMY_DATE_TOKEN = re.compile(r'^\d{1,2}/\d{1,2}/\d{4}$')

# =============================================================================
# Free narration
# =============================================================================

# Up to five legs: DXB-LHE, LHE/JED/LHE, ...
MULTI_LEG_ROUTE = re.compile(r'\b([A-Z]{3}(?:[/-][A-Z]{3}){1,4})\b')

# 5-8 character booking code with at least one letter
NARRATION_PNR = re.compile(r'\b(?=[A-Z0-9]*[A-Z])([A-Z0-9]{5,8})(?=\s|$|-)')


def normalize_route(route: str) -> str:
    """Write route legs with hyphens: "DXB/LHE" -> "DXB-LHE"."""
    return route.replace("/", "-")
