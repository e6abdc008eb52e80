class AgendaError(Exception):
    """Base class for scheduling core errors."""
    pass


class ValidationError(AgendaError, ValueError):
    """Raised before any write when input is missing required fields or has end <= start."""
    pass


class NotFoundError(AgendaError, LookupError):
    """Raised when operating on an unknown booking, slot or document id."""
    pass


class InvalidStateError(AgendaError):
    """Raised when a slot transition is not allowed from its current status."""
    pass


class ReconciliationError(AgendaError):
    """Raised when the availability index could not be written. Logged and swallowed by the reconciler."""
    pass


class BackingStoreError(AgendaError):
    """Raised when the backing document store fails (network errors, HTTP errors, bad payloads)."""
    pass
