"""Validation report for collecting and formatting validation issues."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional


class ValidationSeverity(IntEnum):
    """Severity levels for validation issues."""

    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass
class ValidationIssue:
    """A single validation finding.

    Attributes:
        severity: The severity level of the issue
        field: What the issue is about (e.g. "hours", "weekly_total")
        message: Human-readable description of the issue
        value: The value that caused the issue
        context: Optional context information (e.g. date, timesheet id)
    """

    severity: ValidationSeverity
    field: str
    message: str
    value: Any = None
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        context_str = ""
        if self.context:
            context_str = " (" + ", ".join(f"{k}={v}" for k, v in self.context.items()) + ")"
        return f"[{self.severity.name}] {self.field}: {self.message}{context_str}"


class ValidationReport:
    """Collects validation issues for a timesheet.

    Example:
        >>> report = ValidationReport()
        >>> report.add_warning("daily_hours", "Monday 2024-06-03: no entries")
        >>> report.is_clean()
        False
        >>> report.messages()
        ['Monday 2024-06-03: no entries']
    """

    def __init__(self) -> None:
        self.issues: List[ValidationIssue] = []

    def _count(self, severity: ValidationSeverity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def error_count(self) -> int:
        return self._count(ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return self._count(ValidationSeverity.WARNING)

    def is_valid(self) -> bool:
        """True if there are no errors. Warnings do not affect validity."""
        return self.error_count == 0

    def is_clean(self) -> bool:
        """True if there are neither errors nor warnings."""
        return self.error_count == 0 and self.warning_count == 0

    def add(
        self,
        severity: ValidationSeverity,
        field: str,
        message: str,
        value: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.issues.append(ValidationIssue(severity, field, message, value, context))

    def add_error(self, field: str, message: str, value: Any = None, context=None) -> None:
        self.add(ValidationSeverity.ERROR, field, message, value, context)

    def add_warning(self, field: str, message: str, value: Any = None, context=None) -> None:
        self.add(ValidationSeverity.WARNING, field, message, value, context)

    def add_info(self, field: str, message: str, value: Any = None, context=None) -> None:
        self.add(ValidationSeverity.INFO, field, message, value, context)

    def get(self, severity: ValidationSeverity) -> List[ValidationIssue]:
        """Return issues of exactly the given severity."""
        return [issue for issue in self.issues if issue.severity == severity]

    def messages(self, min_severity: ValidationSeverity = ValidationSeverity.WARNING) -> List[str]:
        """Return the messages of issues at or above ``min_severity``."""
        return [issue.message for issue in self.issues if issue.severity >= min_severity]

    def merge(self, other: "ValidationReport") -> None:
        self.issues.extend(other.issues)

    def summary(self) -> str:
        parts = []
        for severity, label in (
            (ValidationSeverity.ERROR, "error(s)"),
            (ValidationSeverity.WARNING, "warning(s)"),
            (ValidationSeverity.INFO, "info message(s)"),
        ):
            count = self._count(severity)
            if count:
                parts.append(f"{count} {label}")
        return ", ".join(parts) if parts else "No issues found"

    def format(self) -> str:
        """Format the report for display, grouped by severity."""
        if not self.issues:
            return "Validation successful - no issues found"

        lines = [f"Validation Report - {self.summary()}", "=" * 60]
        for severity in sorted(ValidationSeverity, reverse=True):
            group = self.get(severity)
            if group:
                lines.append(f"\n{severity.name}S:")
                lines.extend(f"  - {issue}" for issue in group)
        return "\n".join(lines)
