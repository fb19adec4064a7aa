"""Output schema handling for structured turns.

A schema is either a raw JSON Schema dict, forwarded as-is, or a pydantic
model class. Model classes are converted with ``model_json_schema()`` and the
final response is validated back into the model.
"""

import json
import logging
import shutil
import tempfile
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from .errors import ConfigError, SchemaValidationError

logger = logging.getLogger(__name__)


def resolve_output_schema(
    schema: Any,
) -> tuple[dict[str, Any] | None, type[BaseModel] | None]:
    """Normalize an output schema to (json_schema, model).

    Returns:
        The JSON Schema to forward to the process, and the pydantic model to
        validate against (None for raw schemas).

    Raises:
        ConfigError: If the schema is neither a mapping nor a pydantic model.
    """
    if schema is None:
        return None, None
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return schema.model_json_schema(), schema
    if isinstance(schema, Mapping):
        return dict(schema), None
    raise ConfigError(
        "output_schema must be a JSON Schema object or a pydantic model class, "
        f"got {type(schema).__name__}"
    )


@contextmanager
def output_schema_file(schema: dict[str, Any] | None) -> Iterator[str | None]:
    """Write a schema to a temporary file for ``--output-schema``.

    Yields the file path (None when there is no schema). The file and its
    directory are removed on exit.
    """
    if schema is None:
        yield None
        return

    schema_dir = Path(tempfile.mkdtemp(prefix="trill-output-schema-"))
    try:
        schema_path = schema_dir / "schema.json"
        schema_path.write_text(json.dumps(schema), encoding="utf-8")
        yield str(schema_path)
    finally:
        shutil.rmtree(schema_dir, ignore_errors=True)
        logger.debug("Removed output schema dir %s", schema_dir)


def validate_response(model: type[BaseModel], response: str) -> BaseModel:
    """Validate a final response against a pydantic model.

    Raises:
        SchemaValidationError: If the response is not JSON matching the model.
    """
    try:
        return model.model_validate_json(response)
    except ValidationError as e:
        raise SchemaValidationError(
            f"Final response does not match {model.__name__}",
            response=response,
            cause=e,
        ) from e
