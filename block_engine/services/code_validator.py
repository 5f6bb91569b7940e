"""
Static security checks for generated component code.

This is a denylist of regular expressions: a speed bump in front of the
block library, not a sandbox. The rule lists are plain data so a deployment
can ship a newer rule file (see ``VALIDATION_RULES_FILE``) without a code
change.
"""
import json
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Sequence, Union

from config import settings
from logging_config import logger
from services.block_models import ValidationResult


RULESET_VERSION = "2024.1"

MIN_CODE_LENGTH = 50
MAX_CODE_LENGTH = 50_000

EXPORT_MARKERS = ("export default", "export {")


@dataclass(frozen=True)
class ValidationRule:
    """A pattern and the message reported when it matches"""
    pattern: str
    message: str
    ignore_case: bool = False
    compiled: "re.Pattern[str]" = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        flags = re.IGNORECASE if self.ignore_case else 0
        object.__setattr__(self, "compiled", re.compile(self.pattern, flags))

    def matches(self, code: str) -> bool:
        return self.compiled.search(code) is not None

    @classmethod
    def from_dict(cls, data: dict) -> "ValidationRule":
        return cls(
            pattern=data["pattern"],
            message=data["message"],
            ignore_case=bool(data.get("ignore_case", False))
        )


# Any match rejects the code
REJECT_RULES: List[ValidationRule] = [
    ValidationRule(r"window\.location\s*=", "Direct window.location assignment detected"),
    ValidationRule(r"\beval\s*\(", "eval() usage detected"),
    ValidationRule(r"\bFunction\s*\(", "Function constructor detected"),
    ValidationRule(r"dangerouslySetInnerHTML", "dangerouslySetInnerHTML detected"),
    ValidationRule(r"<script[\s>]", "Script tag detected", ignore_case=True),
    ValidationRule(r"\bon\w+\s*=\s*[\"']", "Inline event handler detected", ignore_case=True),
    ValidationRule(r"process\.env", "process.env reference detected (server-side code)"),
    ValidationRule(r"document\.write", "document.write detected"),
    ValidationRule(r"innerHTML\s*=", "innerHTML assignment detected"),
    ValidationRule(
        r"\.createElement\s*\(\s*[\"']script[\"']",
        "Dynamic script creation detected",
        ignore_case=True
    ),
    ValidationRule(r"import\s+.*\s+from\s+[\"']http", "Remote URL import detected"),
]

# Suspicious but allowed
WARN_RULES: List[ValidationRule] = [
    ValidationRule(r"localStorage|sessionStorage", "Local/session storage usage detected"),
    ValidationRule(r"\bfetch\s*\(", "Fetch API usage detected - ensure proper error handling"),
    ValidationRule(r"new\s+WebSocket", "WebSocket usage detected"),
    ValidationRule(r"\[\s*\.\.\.\w+\s*\]", "Spread operator usage - ensure data validation"),
]


class CodeValidator:
    """Runs reject rules, warn rules and structural checks over a code string"""

    def __init__(
        self,
        reject_rules: Optional[Sequence[ValidationRule]] = None,
        warn_rules: Optional[Sequence[ValidationRule]] = None,
        version: str = RULESET_VERSION,
        min_length: int = MIN_CODE_LENGTH,
        max_length: int = MAX_CODE_LENGTH
    ):
        self.reject_rules = list(REJECT_RULES if reject_rules is None else reject_rules)
        self.warn_rules = list(WARN_RULES if warn_rules is None else warn_rules)
        self.version = version
        self.min_length = min_length
        self.max_length = max_length

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "CodeValidator":
        """
        Load rules from a JSON file.

        Expected shape::

            {"version": "...", "reject": [{"pattern": "...", "message": "..."}], "warn": [...]}

        Missing lists fall back to the built-in rules.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))

        reject = data.get("reject")
        warn = data.get("warn")
        validator = cls(
            reject_rules=[ValidationRule.from_dict(r) for r in reject] if reject is not None else None,
            warn_rules=[ValidationRule.from_dict(r) for r in warn] if warn is not None else None,
            version=str(data.get("version", RULESET_VERSION))
        )
        logger.info(
            "Loaded code validation rules",
            path=str(path),
            version=validator.version,
            reject_rules=len(validator.reject_rules),
            warn_rules=len(validator.warn_rules)
        )
        return validator

    def validate(self, code: str) -> ValidationResult:
        errors: List[str] = []
        warnings: List[str] = []

        for rule in self.reject_rules:
            if rule.matches(code):
                errors.append(rule.message)

        for rule in self.warn_rules:
            if rule.matches(code):
                warnings.append(rule.message)

        if not any(marker in code for marker in EXPORT_MARKERS):
            errors.append("No default export found")

        if len(code) < self.min_length:
            errors.append("Generated code is suspiciously short")

        if len(code) > self.max_length:
            errors.append(f"Generated code exceeds maximum length ({self.max_length // 1000}KB)")

        return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def load_validator(rules_file: Optional[str] = None) -> CodeValidator:
    """Validator from a rule file when configured, built-in rules otherwise"""
    if rules_file:
        return CodeValidator.from_file(rules_file)
    return CodeValidator()


_default_validator = CodeValidator()


def validate_code(code: str) -> ValidationResult:
    """Validate generated code against the built-in rule set"""
    return _default_validator.validate(code)


@lru_cache
def get_configured_validator() -> CodeValidator:
    """Validator for this deployment, loaded once from VALIDATION_RULES_FILE if set"""
    return load_validator(settings.VALIDATION_RULES_FILE)
