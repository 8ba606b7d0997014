"""Aggregation module for upload summaries."""
from aggregator.summary import IngestionSummary, SummaryAggregator, summarize_records

__all__ = ["IngestionSummary", "SummaryAggregator", "summarize_records"]
