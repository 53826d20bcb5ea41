from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import RLock
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError

from plan_access import config
from plan_access.errors import RuleSetLoadError, RuleSetValidationError
from plan_access.rules import RuleSet
from plan_access.schemas import RuleSetSchema
from plan_access.validation import validate_rule_set

logger = logging.getLogger(__name__)


def parse_rule_set(raw: Mapping[str, Any], *, source: str = "<memory>") -> RuleSet:
    """Parse a rule set from its JSON object form."""
    if not isinstance(raw, Mapping):
        raise RuleSetLoadError(source, "rule set must be a JSON object")
    try:
        schema = RuleSetSchema.model_validate(dict(raw))
        return schema.to_rule_set()
    except (ValidationError, ValueError) as exc:
        raise RuleSetLoadError(source, str(exc), cause=exc) from exc


class RuleSetLoader:
    """Loads a rule set from a JSON file with reload support.

    Reload builds a complete new RuleSet before swapping it in, so readers
    see either the old or the new rule set, never a partial one.
    """

    def __init__(self, config_path: Optional[str] = None, *, strict: Optional[bool] = None) -> None:
        self._config_path = Path(config_path or config.get_rules_path())
        self._strict = config.strict_validation() if strict is None else strict
        self._lock = RLock()
        self._rule_set: RuleSet
        self.validation_errors: List[str] = []
        self.reload()

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def rule_set(self) -> RuleSet:
        with self._lock:
            return self._rule_set

    def reload(self) -> RuleSet:
        raw = self._read_config_file()
        rule_set = parse_rule_set(raw, source=str(self._config_path))
        errors = validate_rule_set(rule_set)

        if errors:
            if self._strict:
                raise RuleSetValidationError(str(self._config_path), errors)
            logger.warning(
                "Rule set validation errors",
                extra={"source": str(self._config_path), "errors": errors},
            )

        with self._lock:
            self._rule_set = rule_set
            self.validation_errors = errors

        logger.info(
            "Loaded rule set",
            extra={
                "source": str(self._config_path),
                "plans": len(rule_set.plans),
                "protected_routes": len(rule_set.protected_routes),
                "components": len(rule_set.components),
            },
        )
        return rule_set

    def _read_config_file(self) -> dict:
        try:
            with self._config_path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise RuleSetLoadError(str(self._config_path), str(exc), cause=exc) from exc
        if not isinstance(raw, dict):
            raise RuleSetLoadError(str(self._config_path), "rule set must contain a top-level object")
        return raw
