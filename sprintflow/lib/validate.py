"""
Schema validation for sprintflow.

The sprint store and gate configs are checked at the file boundary, on
read and before every write. Bad data fails loudly instead of being
half-applied.
"""

import json
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema.exceptions import best_match


class ValidationError(Exception):
    """A document did not match its schema, or could not be parsed."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


_validators: dict[str, object] = {}


def schemas_dir() -> Path:
    return Path(__file__).parent.parent / "schemas"


def _validator_for(schema_name: str):
    """Build (once) a validator for schemas/<name>.schema.json."""
    if schema_name not in _validators:
        schema_path = schemas_dir() / f"{schema_name}.schema.json"
        if not schema_path.exists():
            raise ValidationError(schema_name, f"Schema file not found: {schema_path}")
        schema = json.loads(schema_path.read_text())
        cls = jsonschema.validators.validator_for(schema)
        cls.check_schema(schema)
        _validators[schema_name] = cls(schema)
    return _validators[schema_name]


def validate(data: Any, schema_name: str) -> None:
    """
    Validate data against a named schema.

    Only the most relevant error is reported.

    Raises:
        ValidationError: if the data doesn't match
    """
    error = best_match(_validator_for(schema_name).iter_errors(data))
    if error is None:
        return
    path = ".".join(str(p) for p in error.absolute_path) or "(root)"
    raise ValidationError(schema_name, error.message, path)


def load_json(filepath: Path, schema_name: str) -> dict:
    """
    Read a JSON file and validate it.

    Raises:
        ValidationError: if the file is not JSON or doesn't match
    """
    try:
        data = json.loads(filepath.read_text())
    except json.JSONDecodeError as e:
        raise ValidationError(schema_name, f"Invalid JSON in {filepath}: {e}") from None

    validate(data, schema_name)
    return data


def validate_before_write(data: dict, schema_name: str, filepath: Path) -> None:
    """Refuse to write data that would not load back."""
    try:
        validate(data, schema_name)
    except ValidationError as e:
        raise ValidationError(
            schema_name,
            f"Refusing to write invalid data to {filepath}: {e}"
        ) from None
