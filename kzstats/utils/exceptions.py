"""
Custom exceptions for the stats API with client-safe error messages.
"""

class StatsException(Exception):
    """Base exception for stats-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class InvalidIdentityError(StatsException):
    """Raised when an identifier or filter value cannot be parsed."""
    def __init__(self, value, expected: str):
        self.value = value
        self.expected = expected
        super().__init__(
            f"Invalid identifier {value!r}: expected {expected}",
            f"Invalid value `{value}`. Expected {expected}."
        )

class NotFoundError(StatsException):
    """Raised when a lookup or aggregate matches no rows."""
    def __init__(self, what: str, details: str = None):
        self.what = what
        super().__init__(
            f"No {what} found" + (f" ({details})" if details else ""),
            "Found no data."
        )

class InvalidDateRangeError(StatsException):
    """Raised when `created_after` is not strictly before `created_before`."""
    def __init__(self, created_after, created_before):
        self.created_after = created_after
        self.created_before = created_before
        super().__init__(
            f"Invalid date range: {created_after} >= {created_before}",
            "`created_after` must be earlier than `created_before`."
        )

class StoreError(StatsException):
    """Raised when the relational store fails."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Database error during {operation}: {details}",
            "Database error. Please try again later."
        )
