"""Error handling types (Result + ErrorReport)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar("T")


class ErrorType(Enum):
    FILE_NOT_FOUND = "file_not_found"
    PARSE_ERROR = "parse_error"
    VALIDATION_ERROR = "validation_error"
    SCHEME_REWRITE_ERROR = "scheme_rewrite_error"
    LAUNCH_ERROR = "launch_error"
    CLIPBOARD_ERROR = "clipboard_error"
    TIMEOUT_ERROR = "timeout_error"


@dataclass
class Error:
    error_type: ErrorType
    message: str
    context: dict = field(default_factory=dict)
    original_exception: Exception | None = None


@dataclass
class Result(Generic[T]):
    success: bool
    value: T | None = None
    error: Error | None = None

    @staticmethod
    def ok(value: T = None) -> "Result[T]":
        return Result(success=True, value=value)

    @staticmethod
    def err(error: Error) -> "Result[T]":
        return Result(success=False, error=error)

    def is_ok(self) -> bool:
        return self.success

    def is_err(self) -> bool:
        return not self.success


@dataclass
class ErrorReport:
    errors: list[Error] = field(default_factory=list)
    warnings: list[Error] = field(default_factory=list)

    def add_error(self, error: Error):
        self.errors.append(error)
        logger.bind(
            operation="error_report",
            status="error",
            error_type=error.error_type.value,
            **error.context
        ).error(error.message)

    def add_warning(self, error: Error):
        self.warnings.append(error)
        logger.bind(
            operation="error_report",
            status="warning",
            error_type=error.error_type.value,
            **error.context
        ).warning(error.message)

    def collect_result(self, result: Result) -> bool:
        """Collect error from Result into report if failed."""
        if result.is_err():
            self.add_error(result.error)
            return False
        return True

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def log_summary(self, op_trace_id: str):
        logger.info(
            "Operation complete",
            operation="error_report",
            status="complete",
            trace_id=op_trace_id,
            metrics={
                "total_errors": len(self.errors),
                "total_warnings": len(self.warnings)
            }
        )
