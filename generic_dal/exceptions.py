"""
Error taxonomy of the data access layer.

- ArgumentError: the caller passed None where a value is required, or an
  object of the wrong type to a loosely typed entry point. Raised directly,
  never wrapped.
- RepositoryError: any failure coming out of a storage backend or a
  listener. Callers can catch this one kind without knowing the backend; the
  original exception is kept as ``cause`` (and ``__cause__``).
- ObserverError: a failure inside an ErrorObserver. It is logged and
  suppressed, never raised to the caller.
"""

from typing import Optional, Protocol, runtime_checkable


class ArgumentError(ValueError):
    """Raised when a required argument is missing or has the wrong type"""

    def __init__(self, argument: str, reason: str = "must not be None"):
        self.argument = argument
        super().__init__(f"{argument} {reason}")


class RepositoryError(Exception):
    """Uniform error for every backend or listener failure"""

    def __init__(
        self,
        operation: str,
        cause: Optional[BaseException] = None,
    ):
        self.operation = operation
        self.cause = cause
        message = f"Repository operation '{operation}' failed"
        if cause is not None:
            message = f"{message}: {type(cause).__name__}: {cause}"
        super().__init__(message)


class ObserverError(Exception):
    """Raised internally when an ErrorObserver fails; always suppressed"""

    pass


@runtime_checkable
class ErrorObserver(Protocol):
    """Receives every RepositoryError a repository creates.

    Intended for diagnostics and telemetry. Implementations may raise;
    the repository logs and suppresses such failures.
    """

    def on_error_created(self, error: RepositoryError) -> None: ...
