"""
Travel detail extraction from composite and narration cells.

Strategy:
Strategies are tried in priority order and the first one whose predicate
accepts the text produces the result. Every field of the result may be
None; a missing field is an information gap, never an error.

Composite cells:   sales narration -> labeled (3 variants) -> token scan
Narration cells:   sales narration -> free narration scan
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, List, Optional, Sequence

from extractor.patterns import (
    DMY_DATE_TOKEN,
    ISO_DATE_TOKEN,
    LABELED_BARE_CODE,
    LABELED_LOOSE,
    LABELED_WITH_PNR_PREFIX,
    MULTI_LEG_ROUTE,
    NARRATION_PNR,
    PNR_TOKEN,
    PNR_TOKEN_MIN_LENGTH,
    ROUTE_TOKEN,
    SALES_DELIMITER,
    SALES_MARKER_UPPER,
    SALES_MIN_SEGMENTS,
    TITLE_PREFIX_PATTERN,
    normalize_route,
)
from normalizer.date_parser import find_dmy_date, parse_date, parse_dmy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TravelFields:
    """Travel details recovered from one cell."""
    customer_name: Optional[str] = None
    route: Optional[str] = None
    pnr: Optional[str] = None
    flying_date: Optional[date] = None
    strategy: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return all(
            v is None for v in (self.customer_name, self.route, self.pnr, self.flying_date)
        )


EMPTY_FIELDS = TravelFields()


@dataclass(frozen=True)
class Strategy:
    """A named (predicate, extractor) pair."""
    name: str
    predicate: Callable[[str], bool]
    extractor: Callable[[str], TravelFields]


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = " ".join(value.split())
    return value or None


# =============================================================================
# Sales narration
# =============================================================================

def _is_sales_narration(text: str) -> bool:
    return (
        SALES_MARKER_UPPER in text.upper()
        and len(text.split(SALES_DELIMITER)) >= SALES_MIN_SEGMENTS
    )


def _extract_sales_narration(text: str) -> TravelFields:
    """
    "SALES - MR JOHN DOE - DXB/LHE - 94A63T - 06/12/2024"

    Segment 2 is the name (title dropped), 3 the route as written,
    4 the PNR and 5 the DD/MM/YYYY flying date.
    """
    parts = text.split(SALES_DELIMITER)
    name = _clean(parts[1])
    if name:
        name = _clean(TITLE_PREFIX_PATTERN.sub("", name))

    return TravelFields(
        customer_name=name,
        route=_clean(parts[2]),
        pnr=_clean(parts[3]),
        flying_date=find_dmy_date(parts[4]),
        strategy="sales_narration",
    )


# =============================================================================
# Labeled composite
# =============================================================================

def _parse_date_token(token: str) -> Optional[date]:
    """Read a single DD/MM/YYYY or ISO token; anything else is None."""
    token = token.strip()
    if ISO_DATE_TOKEN.match(token):
        return parse_date(token)
    if DMY_DATE_TOKEN.match(token):
        return parse_dmy(token)
    return None


def _labeled_strategy(
    name: str, pattern, date_parser: Callable[[str], Optional[date]] = parse_date
) -> Strategy:
    """Build a strategy for one variant of "<Name> <ROUTE> <PNR> <date>"."""

    def predicate(text: str) -> bool:
        return pattern.match(text) is not None

    def extractor(text: str) -> TravelFields:
        match = pattern.match(text)
        customer_name, route, pnr, flying_date = match.groups()
        return TravelFields(
            customer_name=_clean(customer_name),
            route=normalize_route(route.strip()),
            pnr=_clean(pnr),
            flying_date=date_parser(flying_date),
            strategy=name,
        )

    return Strategy(name=name, predicate=predicate, extractor=extractor)


# =============================================================================
# Token scan
# =============================================================================

def _extract_token_scan(text: str) -> TravelFields:
    """
    Walk whitespace tokens. The first route token splits the text:
    everything before it is the customer name and the first PNR-like
    token after it is the PNR. The first date token anywhere is the
    flying date.

    Without a route there is no way to tell a name from a code, so no
    PNR is taken.
    """
    tokens = text.split()
    customer_name = None
    route = None
    pnr = None
    flying_date = None

    for i, token in enumerate(tokens):
        if route is None and ROUTE_TOKEN.match(token):
            route = normalize_route(token)
            if i > 0:
                customer_name = " ".join(tokens[:i])
            continue

        token_date = _parse_date_token(token)
        if token_date is not None:
            if flying_date is None:
                flying_date = token_date
            continue

        if (
            route is not None
            and pnr is None
            and len(token) >= PNR_TOKEN_MIN_LENGTH
            and PNR_TOKEN.match(token)
        ):
            pnr = token

    return TravelFields(
        customer_name=customer_name,
        route=route,
        pnr=pnr,
        flying_date=flying_date,
        strategy="token_scan",
    )


# =============================================================================
# Free narration
# =============================================================================

def _extract_free_narration(text: str) -> TravelFields:
    """Look for a route, a PNR and a DD/MM/YYYY date independently."""
    route_match = MULTI_LEG_ROUTE.search(text)
    pnr_match = NARRATION_PNR.search(text)

    return TravelFields(
        route=normalize_route(route_match.group(1)) if route_match else None,
        pnr=pnr_match.group(1) if pnr_match else None,
        flying_date=find_dmy_date(text),
        strategy="free_narration",
    )


def _always(text: str) -> bool:
    return True


# =============================================================================
# Strategy chains
# =============================================================================

SALES_NARRATION = Strategy("sales_narration", _is_sales_narration, _extract_sales_narration)

COMPOSITE_STRATEGIES: List[Strategy] = [
    SALES_NARRATION,
    _labeled_strategy("labeled_pnr_prefix", LABELED_WITH_PNR_PREFIX),
    _labeled_strategy("labeled_bare_code", LABELED_BARE_CODE),
    _labeled_strategy("labeled_loose", LABELED_LOOSE, _parse_date_token),
    Strategy("token_scan", _always, _extract_token_scan),
]

NARRATION_STRATEGIES: List[Strategy] = [
    SALES_NARRATION,
    Strategy("free_narration", _always, _extract_free_narration),
]


def run_strategies(text: Any, strategies: Sequence[Strategy]) -> TravelFields:
    """
    Apply the first strategy whose predicate accepts the text.

    Args:
        text: Cell content (anything; non-strings are rendered with str())
        strategies: Ordered strategy chain

    Returns:
        TravelFields, all-None when the text is empty or nothing matched
    """
    if text is None:
        return EMPTY_FIELDS

    text_str = " ".join(str(text).split())
    if not text_str:
        return EMPTY_FIELDS

    for strategy in strategies:
        if strategy.predicate(text_str):
            fields = strategy.extractor(text_str)
            logger.debug("'%s' matched by %s", text_str, strategy.name)
            return fields

    return EMPTY_FIELDS


def extract_from_composite(text: Any) -> TravelFields:
    """
    Recover name, route, PNR and flying date from a composite cell.

    Args:
        text: e.g. "Ali Khan DXB-LHE PNR54321 2025-08-01"

    Returns:
        TravelFields
    """
    return run_strategies(text, COMPOSITE_STRATEGIES)


def extract_from_narration(text: Any) -> TravelFields:
    """
    Recover travel details from a narration cell.

    Args:
        text: e.g. "SALES - MR JOHN DOE - DXB/LHE - 94A63T - 06/12/2024"

    Returns:
        TravelFields
    """
    return run_strategies(text, NARRATION_STRATEGIES)
