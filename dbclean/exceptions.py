"""Errors raised while cleaning schemas."""


class DbCleanError(Exception):
    """Base class for all clean failures."""


class OperationDisabled(DbCleanError):
    def __init__(self, message=None):
        super().__init__(
            message
            or "Unable to execute clean as it has been disabled with the clean_disabled setting."
        )


class HookFailed(DbCleanError):
    """A lifecycle callback raised while being notified."""

    def __init__(self, callback, phase: str, cause: BaseException):
        self.callback = callback
        self.phase = phase
        self.cause = cause
        super().__init__(f"Error while executing {phase} callback {callback!r}: {cause}")


class SchemaOperationFailed(DbCleanError):
    """Dropping, cleaning or inspecting a single schema failed."""

    def __init__(self, schema, operation: str, cause: BaseException):
        self.schema = schema
        self.operation = operation
        self.cause = cause
        super().__init__(f"Unable to {operation} schema {schema}: {cause}")


class HistoryQueryFailed(DbCleanError):
    def __init__(self, table: str, cause: BaseException):
        self.table = table
        self.cause = cause
        super().__init__(f"Unable to query schema history table {table}: {cause}")
