"""Custom exceptions for the garden.

This module provides exception classes used throughout the system.

ERROR TAXONOMY:
- ValidationError: rejected before any store call, no state change
- TransientStoreError: recoverable store failure, surfaced to the caller
- ResourceNotFound: addressed document is gone (benign race for water/uproot)
- TransitionError: an edge the lifecycle does not allow
"""


class GardenError(Exception):
    """Base exception for all garden errors."""

    def __init__(self, message: str, details: dict | None = None):
        """Initialize exception with message and optional details.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details


class ResourceNotFound(GardenError):
    """Exception raised when a requested document is not found."""

    pass


class ValidationError(GardenError):
    """Exception raised when input validation fails."""

    pass


class TransientStoreError(GardenError):
    """Exception raised when the document store fails in a recoverable way.

    No retry is attempted. ``plant`` and ``harvest`` are not idempotent, so a
    caller re-issuing them after a partial failure may create a duplicate
    Plant or Memory.

    Attributes:
        operation: Store primitive that failed ('create', 'update', ...)
        path: Collection or document path the primitive addressed
    """

    operation: str
    path: str

    def __init__(self, message: str, operation: str, path: str):
        """Initialize transient store error.

        Args:
            message: Human-readable error message
            operation: Store primitive that failed
            path: Collection or document path the primitive addressed
        """
        super().__init__(message, details={"operation": operation, "path": path})
        self.operation = operation
        self.path = path


class TransitionError(GardenError):
    """Exception raised when a lifecycle transition is not allowed.

    The lifecycle is the one-way chain Seed -> Plant -> Memory, with Plant
    also allowed to end without a Memory. Any other edge raises this.

    Attributes:
        source: Lifecycle stage the entity is in
        target: Lifecycle stage that was requested
    """

    source: str
    target: str

    def __init__(self, message: str, source: str, target: str):
        super().__init__(message, details={"source": source, "target": target})
        self.source = source
        self.target = target
