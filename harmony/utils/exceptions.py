"""
Custom exceptions for the progress engine.

Each failure class tells the caller what to do next: retry the run,
skip a single rule, treat the outcome as success, or reject the request.
"""


class HarmonyError(Exception):
    """Base exception for all progress engine errors."""

    def __init__(self, message: str, code: str = "HARMONY_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class TransientStorageError(HarmonyError):
    """Read or write against the event/stats store failed. Safe to retry."""

    def __init__(self, operation: str, original: Exception = None):
        self.operation = operation
        self.original = original
        message = f"Storage failure during {operation}"
        if original is not None:
            message = f"{message}: {original}"
        super().__init__(message, "TRANSIENT_STORAGE_ERROR")


class ConfigurationError(HarmonyError):
    """A milestone rule references a metric or category that cannot be resolved."""

    def __init__(self, milestone_id: str, reason: str):
        self.milestone_id = milestone_id
        self.reason = reason
        super().__init__(f"Milestone {milestone_id} is misconfigured: {reason}", "CONFIGURATION_ERROR")


class DuplicateAwardRace(HarmonyError):
    """A concurrent award already inserted the same (user, milestone) row."""

    def __init__(self, user_id: str, milestone_id: str):
        self.user_id = user_id
        self.milestone_id = milestone_id
        super().__init__(
            f"Milestone {milestone_id} already awarded to user {user_id}",
            "DUPLICATE_AWARD",
        )


class InvalidInputError(HarmonyError):
    """Malformed user id, category or date."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"INVALID_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)


class NotFoundError(HarmonyError):
    """Resource not found."""

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with ID {identifier} not found"
        super().__init__(message, f"{resource.upper()}_NOT_FOUND")


class MilestoneNotFoundError(NotFoundError):
    """Milestone (definition or award) not found."""

    def __init__(self, identifier=None):
        super().__init__("Milestone", identifier)
