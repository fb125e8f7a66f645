from typing import Any, Optional


class DynamoDBMapperError(Exception):
    """Root of the mapper's exception hierarchy.

    Subclasses pass their extra attributes as keyword context. Entries whose
    value is None are dropped, so ``str()`` only shows what is known.

    Attributes:
        message: Human-readable error message
        original_error: The exception this error was raised from, usually a botocore ClientError
        context: Known details about the failure (resource, strategy, ...)
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, **context: Any):
        self.message = message
        self.original_error = original_error
        self.context = {key: value for key, value in context.items() if value is not None}
        super().__init__(message)

    @property
    def error_code(self) -> Optional[str]:
        """AWS error code of the ClientError this error was mapped from, or None."""
        response = getattr(self.original_error, 'response', None)
        if not response:
            return None
        return response.get('Error', {}).get('Code')

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} [{details}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, error_code={self.error_code!r}, context={self.context!r})"
