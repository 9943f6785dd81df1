"""Adapters that run external analyzers and return raw issue records."""

from .base import AnalyzerOutputError
from .lint import LintAnalyzer
from .style import StyleAnalyzer

__all__ = [
    "AnalyzerOutputError",
    "LintAnalyzer",
    "StyleAnalyzer",
]
