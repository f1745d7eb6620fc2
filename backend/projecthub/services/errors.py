"""Domain errors raised by services and rendered by the API's exception handlers."""


class RecordError(Exception):
    """Base class for errors that map to a client-facing HTTP status."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidTableName(RecordError):
    def __init__(self, table_name: str):
        super().__init__("Invalid table name")
        self.table_name = table_name


class UnknownTableError(RecordError):
    status_code = 404

    def __init__(self, table_name: str):
        super().__init__(f"Table '{table_name}' not found")
        self.table_name = table_name


class UnknownColumnError(RecordError):
    def __init__(self, table_name: str, columns: list[str]):
        super().__init__(
            f"Unknown column(s) for {table_name}: {', '.join(columns)}"
        )
        self.table_name = table_name
        self.columns = columns


class EmptyPayloadError(RecordError):
    pass


class RecordNotFound(RecordError):
    status_code = 404


class EnumValidationError(RecordError):
    """Raised before a write when fields hold values outside their enum."""

    def __init__(self, table_name: str, errors: list[str]):
        # First message is the headline, all are kept for the response body
        super().__init__(errors[0])
        self.table_name = table_name
        self.errors = errors
