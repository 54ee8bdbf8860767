"""
Data contracts for the workspace file and the reconciliation payload.

Workspaces are checked strictly on load. Result payloads are only reviewed:
violations are logged and the payload is still written.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"
STRICT = "STRICT"
REVIEW = "REVIEW"
WORKSPACE_SCHEMA = "workspace"
RESULT_SCHEMA = "reconciliation_result"


class ContractError(Exception):
    """Raised when a payload violates its data contract."""

    def __init__(self, schema_name: str, problems: List[str]) -> None:
        self.schema_name = schema_name
        self.problems = problems
        super().__init__(f"Data Contract Violation ({schema_name}): {'; '.join(problems)}")


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> Dict[str, Any]:
    schema_path = SCHEMA_DIR / f"{schema_name}.json"
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_name}")
    with schema_path.open("r", encoding="utf-8") as f:
        return dict(json.load(f))


def describe_error(error: ValidationError) -> str:
    location = "/".join(str(part) for part in error.absolute_path) or "<root>"
    return f"{location}: {error.message}"


def contract_problems(data: Dict[str, Any], schema_name: str) -> List[str]:
    """Every violation of `schema_name`, ordered by location in the payload."""
    validator = Draft7Validator(load_schema(schema_name))
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(part) for part in e.absolute_path])
    return [describe_error(error) for error in errors]


def validate_output(data: Dict[str, Any], schema_name: str, mode: str = STRICT) -> None:
    """
    Validate data against one of the bundled schemas.

    Args:
        data: The dictionary to validate.
        schema_name: Name of the schema file (without .json extension).
        mode: 'STRICT' (raises) or 'REVIEW' (logs a warning).

    Raises:
        ContractError: If validation fails and mode is STRICT.
    """
    try:
        problems = contract_problems(data, schema_name)
    except FileNotFoundError as e:
        problems = [str(e)]
    if not problems:
        return
    if mode == STRICT:
        raise ContractError(schema_name, problems)
    logger.warning("Data Contract Violation (%s): %s", schema_name, "; ".join(problems))


def validate_workspace(data: Dict[str, Any]) -> None:
    validate_output(data, WORKSPACE_SCHEMA, mode=STRICT)


def review_result(payload: Dict[str, Any]) -> None:
    validate_output(payload, RESULT_SCHEMA, mode=REVIEW)
