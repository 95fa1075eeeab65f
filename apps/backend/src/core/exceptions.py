class DomainError(Exception):
    """Base class for domain-specific errors."""

    pass


class ProjectNotFoundError(DomainError):
    """Exception raised when a project record does not exist in the store."""

    pass


class GenerationConflictError(DomainError):
    """Exception raised when a generation request conflicts with record state.

    Covers a second attempt while one is already in flight, a retry from a
    status other than ``error``, and a retry that tries to change the idea text.
    """

    pass
