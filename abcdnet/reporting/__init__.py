"""Reporting utilities for ABCDNet."""

from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .tables import comparison_table, format_summary, network_summary, output_table, training_summary

__all__ = [
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "comparison_table",
    "format_summary",
    "network_summary",
    "output_table",
    "training_summary",
]
