"""Exception classes for Rivulet.

Provides standardized exceptions for error handling throughout Rivulet.
"""

from __future__ import annotations


class RivuletError(Exception):
    """Base exception for all Rivulet errors.
    
    Subclass this for specific error categories.
    """

    pass


class InvalidStateError(RivuletError):
    """Operation not allowed in the session's current state.
    
    Raised when writing to a session that has already been finalized.
    Recoverable by calling ``reset()`` on the session.
    """

    def __init__(self, operation: str, message: str | None = None) -> None:
        """Initialize invalid state error.
        
        Args:
            operation: Name of the rejected operation (e.g., "write")
            message: Optional description (defaults to a finalized-session message)
        """
        self.operation = operation
        super().__init__(
            f"Cannot {operation}: {message or 'session is already finalized'}"
        )


class ParseFailure(RivuletError):
    """A block parser could not produce blocks for a span.
    
    Raised by BlockParser implementations. The merge engine degrades it to
    "zero blocks parsed" instead of letting it reach callers.
    """

    def __init__(self, message: str, span_length: int | None = None) -> None:
        """Initialize parse failure.
        
        Args:
            message: Error description
            span_length: Length of the span that failed to parse (optional)
        """
        self.message = message
        self.span_length = span_length

        suffix = f" (span of {span_length} chars)" if span_length is not None else ""
        super().__init__(f"{message}{suffix}")
