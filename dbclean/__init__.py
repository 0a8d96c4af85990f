"""dbclean

Drops or empties PostgreSQL schemas for a schema-migration workflow.
"""

from .callbacks import Callback, SqlScriptCallback
from .clean import CleanPolicy, DbClean
from .config import CleanConfig
from .database import Database
from .exceptions import (
    DbCleanError,
    HistoryQueryFailed,
    HookFailed,
    OperationDisabled,
    SchemaOperationFailed,
)

__version__ = "1.0.0"

__all__ = [
    "Callback",
    "SqlScriptCallback",
    "CleanPolicy",
    "DbClean",
    "CleanConfig",
    "Database",
    "DbCleanError",
    "HistoryQueryFailed",
    "HookFailed",
    "OperationDisabled",
    "SchemaOperationFailed",
]
