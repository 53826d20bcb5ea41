"""
Environment configuration for plan access.

PLAN_ACCESS_RULES_PATH: rule set JSON file loaded by the default service
PLAN_ACCESS_DEBUG: "true" logs every access check at DEBUG level
PLAN_ACCESS_STRICT_VALIDATION: "true" makes the loader raise on validation errors
"""

import os
from typing import Optional

DEFAULT_RULES_PATH = "config/access_rules.json"


def get_rules_path() -> str:
    return os.getenv("PLAN_ACCESS_RULES_PATH", DEFAULT_RULES_PATH)


def _env_flag(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() == "true"


def debug_override() -> Optional[bool]:
    """Debug flag from the environment, or None to defer to the rule set."""
    return _env_flag("PLAN_ACCESS_DEBUG")


def strict_validation() -> bool:
    return _env_flag("PLAN_ACCESS_STRICT_VALIDATION") is True
