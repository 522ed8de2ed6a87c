"""Reporting utilities for nn4md."""

from .artifacts import write_manifest
from .export import export_document, load_model, write_model
from .metrics import CsvSink, JsonlSink, ProgressPrinter
from .plots import PlotAdapter
from .summary import write_summary

__all__ = [
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "ProgressPrinter",
    "export_document",
    "load_model",
    "write_manifest",
    "write_model",
    "write_summary",
]
