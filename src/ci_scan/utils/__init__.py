"""Shared utility functions."""

from .atomic_io import atomic_write_data, atomic_write_json
from .cache_annotation import CACHED_MARKER, cached_indication_str
from .error_handling import ErrorContext, log_and_ignore
from .subprocess_utils import SubprocessError, run_command, run_git_command

__all__ = [
    "atomic_write_data",
    "atomic_write_json",
    "CACHED_MARKER",
    "cached_indication_str",
    "ErrorContext",
    "log_and_ignore",
    "SubprocessError",
    "run_command",
    "run_git_command",
]
