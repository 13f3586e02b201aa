from enum import Enum
from typing import Literal, TypeAlias

DiagnosticSeverity: TypeAlias = Literal["error"]
DiagnosticValue: TypeAlias = str | int | bool


class ErrorCode(str, Enum):
    """Canonical internal diagnostic codes."""

    NOT_CALLABLE = "not_callable"
    INVALID_ARRAYS = "invalid_arrays"
    INVALID_NDARRAY = "invalid_ndarray"
    DIM_OUT_OF_BOUNDS = "dim_out_of_bounds"
    DUPLICATE_DIMS = "duplicate_dims"
    LOOP_DIMS_MISMATCH = "loop_dims_mismatch"
    SHAPE_MISMATCH = "shape_mismatch"
    INDEX_OUT_OF_BOUNDS = "index_out_of_bounds"


class ReductionError(ValueError):
    """Structured base error for reduction diagnostics."""

    channel = "error"
    severity: DiagnosticSeverity
    code: str
    external_code: str
    help: str | None
    related: tuple[str, ...]
    data: dict[str, DiagnosticValue]
    message: str

    @staticmethod
    def _normalize_code(code: str | ErrorCode) -> str:
        """Normalize code to canonical internal `snake_case` form."""
        if isinstance(code, ErrorCode):
            return code.value
        if not isinstance(code, str):
            raise TypeError("diagnostic code must be a string or ErrorCode")
        if not code or not code[0].isalpha():
            raise ValueError("diagnostic code must start with a letter")
        if not all(char.isalnum() or char == "_" for char in code):
            raise ValueError("diagnostic code must be snake_case")
        return code.lower()

    @staticmethod
    def _normalize_data(data: dict[str, DiagnosticValue]) -> dict[str, DiagnosticValue]:
        """Validate and copy diagnostic payload data."""
        normalized_data: dict[str, DiagnosticValue] = {}
        for key, value in data.items():
            if not isinstance(key, str):
                raise TypeError("diagnostic data keys must be strings")
            if not isinstance(value, str | int | bool):
                raise TypeError(
                    "diagnostic data values must be str, int, or bool entries"
                )
            normalized_data[key] = value
        return normalized_data

    def __init__(
        self,
        *,
        code: str | ErrorCode,
        message: str,
        help: str | None = None,
        related: tuple[str, ...] = (),
        data: dict[str, DiagnosticValue] | None = None,
    ) -> None:
        """Build one structured reduction error."""
        normalized_code = self._normalize_code(code)
        if not isinstance(message, str) or not message.strip():
            raise ValueError("diagnostic message must be a non-empty string")
        if any(not isinstance(note, str) or not note.strip() for note in related):
            raise ValueError("related diagnostics must be non-empty strings")

        self.code = normalized_code
        self.external_code = normalized_code.upper()
        self.severity = "error"
        self.help = help
        self.related = tuple(related)
        self.data = self._normalize_data({} if data is None else data)
        self.message = message
        super().__init__(message)


class ValidationError(ReductionError):
    """Structured validation-phase error."""

    channel = "validation_error"


class ExecutionError(ReductionError):
    """Structured execution-phase error."""

    channel = "execution_error"


class InvalidArgumentError(ValidationError):
    """Raised when a reduction argument violates the call contract."""


class IndexOutOfBoundsError(ExecutionError, IndexError):
    """Raised when an index conversion falls outside a declared shape."""


__all__ = [
    "DiagnosticValue",
    "ErrorCode",
    "ExecutionError",
    "IndexOutOfBoundsError",
    "InvalidArgumentError",
    "ReductionError",
    "ValidationError",
]
