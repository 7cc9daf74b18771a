# =============================================================================
# Error Handling Types (Result + ErrorReport)
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar('T')


class ErrorType(Enum):
    FILE_NOT_FOUND = "file_not_found"
    PARSE_ERROR = "parse_error"
    VALIDATION_ERROR = "validation_error"
    HOST_ERROR = "host_error"
    REORDER_FAILED = "reorder_failed"


class HostError(Exception):
    """A call into the host workspace failed (e.g. an iTerm2 RPC error)."""


class UnsupportedContainerError(HostError):
    """The container exposes neither whole-list replacement nor moves."""


@dataclass
class Error:
    error_type: ErrorType
    message: str
    context: dict = field(default_factory=dict)
    original_exception: Exception = None


@dataclass
class Result(Generic[T]):
    success: bool
    value: T = None
    error: Error = None

    @staticmethod
    def ok(value: T) -> 'Result[T]':
        return Result(success=True, value=value)

    @staticmethod
    def err(error: Error) -> 'Result[T]':
        return Result(success=False, error=error)

    def is_ok(self) -> bool:
        return self.success

    def is_err(self) -> bool:
        return not self.success


@dataclass
class ErrorReport:
    warnings: list[Error] = field(default_factory=list)

    def add_warning(self, error: Error):
        self.warnings.append(error)
        logger.warning(
            error.message,
            operation="error_report",
            status="warning",
            error_type=error.error_type.value,
            **error.context
        )

    def log_summary(self, op_trace_id: str, operation: str):
        """Log final summary of one command run."""
        logger.info(
            "Operation complete",
            operation=operation,
            status="complete",
            trace_id=op_trace_id,
            metrics={
                "total_warnings": len(self.warnings)
            }
        )
