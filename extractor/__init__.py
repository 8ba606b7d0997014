"""
Extractor module for recovering travel details from ledger text.
"""
from .strategies import (
    TravelFields,
    Strategy,
    COMPOSITE_STRATEGIES,
    NARRATION_STRATEGIES,
    run_strategies,
    extract_from_composite,
    extract_from_narration,
)

__all__ = [
    'TravelFields', 'Strategy', 'COMPOSITE_STRATEGIES', 'NARRATION_STRATEGIES',
    'run_strategies', 'extract_from_composite', 'extract_from_narration',
]
