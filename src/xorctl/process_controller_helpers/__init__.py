"""Building blocks for the process controller."""

from .errors import ProcessTableError, ProcessTerminationError
from .process_models import ProcessRecord, RestartOutcome, TerminationFailure
from .process_table import ProcessTable, PsutilProcessTable

__all__ = [
    "ProcessRecord",
    "ProcessTable",
    "ProcessTableError",
    "ProcessTerminationError",
    "PsutilProcessTable",
    "RestartOutcome",
    "TerminationFailure",
]
