"""Error taxonomy for query construction and execution."""

from typing import Optional


class SQLValidationError(Exception):
    """A query description or report request that cannot be turned into safe SQL."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TableNotAllowed(SQLValidationError):
    pass


class MissingTable(SQLValidationError):
    pass


class InvalidColumnName(SQLValidationError):
    pass


class ColumnNotAllowed(SQLValidationError):
    pass


class InvalidIdentifier(SQLValidationError):
    pass


class EmptySelect(SQLValidationError):
    pass


class UnsupportedFeature(SQLValidationError):
    pass


class UnsupportedOperator(SQLValidationError):
    pass


class InvalidBetween(SQLValidationError):
    pass


class InvalidIn(SQLValidationError):
    pass


class InvalidOrderDirection(SQLValidationError):
    pass


class InvalidValue(SQLValidationError):
    pass


class InvalidLimit(SQLValidationError):
    pass


class MissingParameter(SQLValidationError):
    pass


class InvalidParameter(SQLValidationError):
    pass


class UnsupportedFormat(SQLValidationError):
    pass


class ReadOnlyViolation(SQLValidationError):
    pass


class DatabaseError(Exception):
    """Failure while talking to the roster database."""

    status_code = 500

    def __init__(self, message: str, original: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original = original
