"""
Plan access error hierarchy.

Only load-time problems raise. Evaluation reports denials through
AccessDecision values, never through exceptions.

Provides:
- PlanAccessError: base for all plan access failures
- RuleSetLoadError: rule set file unreadable or structurally invalid
- RuleSetValidationError: rule set failed consistency checks (strict mode)
"""

from typing import List, Optional


class PlanAccessError(Exception):
    """Base exception for plan access failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RuleSetLoadError(PlanAccessError):
    """Raised when a rule set cannot be read or parsed."""

    def __init__(self, source: str, detail: str, cause: Optional[Exception] = None):
        self.source = source
        self.detail = detail
        self.cause = cause
        self.error_code = "RULE_SET_LOAD_FAILED"
        super().__init__(f"Failed to load rule set from {source}: {detail}")

    def to_dict(self) -> dict:
        return {
            "error": self.error_code,
            "message": self.detail,
            "source": self.source,
        }


class RuleSetValidationError(PlanAccessError):
    """Raised by the loader in strict mode when validate_rule_set reports errors."""

    def __init__(self, source: str, errors: List[str]):
        self.source = source
        self.errors = list(errors)
        self.error_code = "RULE_SET_INVALID"
        super().__init__(f"Rule set from {source} has {len(self.errors)} validation error(s)")

    def to_dict(self) -> dict:
        return {
            "error": self.error_code,
            "message": str(self),
            "source": self.source,
            "errors": self.errors,
        }
