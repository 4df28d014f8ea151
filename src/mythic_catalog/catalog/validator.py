"""
Validation of YAML text submitted from the dashboard editor.
"""

import logging
from typing import Any, Dict, List, cast

import yaml

from .models import ValidationReport


class ConfigValidator:
    """Checks text against the document format without ever raising."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def validate(self, text: Any) -> ValidationReport:
        """Parse text as YAML and report the outcome.

        Args:
            text: Text to validate

        Returns:
            ValidationReport with the parsed value when valid, or the error
            message and (when known) 1-based line/column when not
        """
        if not isinstance(text, str):
            return ValidationReport(
                valid=False, error=f"expected text, got {type(text).__name__}"
            )

        try:
            parsed = yaml.safe_load(text)
        except yaml.MarkedYAMLError as e:
            mark = e.problem_mark
            return ValidationReport(
                valid=False,
                error=str(e),
                line=mark.line + 1 if mark else None,
                column=mark.column + 1 if mark else None,
            )
        except yaml.YAMLError as e:
            return ValidationReport(valid=False, error=str(e))
        except Exception as e:
            self.logger.debug(f"Unexpected validation failure: {e}")
            return ValidationReport(valid=False, error=str(e))

        return ValidationReport(valid=True, parsed=parsed)

    def validate_entity_document(self, text: Any) -> ValidationReport:
        """Validate text and warn when it does not look like an entity document.

        An entity document maps ids to attribute mappings (or, for drop
        tables and skill groups, to lists).
        """
        report = self.validate(text)
        if not report.valid:
            return report

        parsed = report.parsed
        warnings: List[str] = []
        if parsed is None:
            warnings.append("Document is empty")
        elif not isinstance(parsed, dict):
            warnings.append(
                f"Top level is {type(parsed).__name__}, expected a mapping of ids"
            )
        else:
            for key, value in cast(Dict[Any, Any], parsed).items():
                if not isinstance(value, (dict, list)):
                    warnings.append(f"Entry '{key}' is not a mapping or list")
        report.warnings = warnings
        return report
