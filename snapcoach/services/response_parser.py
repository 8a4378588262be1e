"""Turn raw model text into validated schema objects."""

import json
import logging
import re
from typing import TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from snapcoach.services.errors import MalformedResponse

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# ``` or ```json (any language tag) at the start, ``` at the end
_LEADING_FENCE = re.compile(r"^\s*```[A-Za-z0-9_+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


def strip_code_fences(text: str) -> str:
    """Strip markdown code block wrappers and surrounding whitespace."""
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def parse_response(raw_text: str | None, schema_class: type[T]) -> T:
    """
    Parse a model reply into schema_class.

    Only structure is checked (required fields, primitive types); values are
    not range-checked.

    Raises:
        MalformedResponse: Empty text, invalid JSON, or schema mismatch.
            The original text is kept on the exception for diagnostics.
    """
    if not raw_text or not raw_text.strip():
        raise MalformedResponse("Empty response from model", raw_text=raw_text)

    json_str = strip_code_fences(raw_text)

    try:
        parsed = json.loads(json_str)
        return TypeAdapter(schema_class).validate_python(parsed)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(
            "Model response failed schema validation for %s: %s",
            schema_class.__name__,
            e,
        )
        raise MalformedResponse(
            f"Response did not match {schema_class.__name__}: {e}",
            raw_text=raw_text,
        ) from e
