"""
Domain errors raised by services. Routes translate them to HTTP responses;
server-action style operations convert them to ActionResult values.
"""


class NotAuthenticatedError(Exception):
    """No session present where one is required."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class ProfileRepairError(Exception):
    """A profiles/talent_profiles read or write failed during repair."""

    def __init__(self, message: str, cause: Exception = None):
        super().__init__(message)
        self.cause = cause
