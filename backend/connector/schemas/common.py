from __future__ import annotations

from typing import Any

from marshmallow import Schema
from marshmallow import ValidationError as MarshmallowValidationError

from ..errors import ValidationError


def load_or_raise(schema: Schema, data: Any) -> dict:
    """Deserialize request input, translating marshmallow errors to our ValidationError."""
    try:
        return schema.load(data or {})
    except MarshmallowValidationError as err:
        messages = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
        raise ValidationError("Invalid input", messages) from err
