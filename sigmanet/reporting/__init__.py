"""Reporting utilities for SigmaNet."""

from .artifacts import describe_network, write_manifest
from .confusion import classification_report, confusion_matrix, format_report, model_accuracy
from .metrics import ConsoleSink, CsvSink, JsonlSink, MetricsCapture
from .plots import PlotAdapter
from .summary import write_summary

__all__ = [
    "ConsoleSink",
    "CsvSink",
    "JsonlSink",
    "MetricsCapture",
    "PlotAdapter",
    "classification_report",
    "confusion_matrix",
    "describe_network",
    "format_report",
    "model_accuracy",
    "write_manifest",
    "write_summary",
]
