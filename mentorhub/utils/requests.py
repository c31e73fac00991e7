"""
Helpers for reading and validating request payloads
"""
from enum import Enum
from typing import Any, Dict, Type, TypeVar

from flask import request
from pydantic import BaseModel

ModelT = TypeVar('ModelT', bound=BaseModel)

# Form fields that carry several values
LIST_FIELDS = ('options',)


def request_payload() -> Dict[str, Any]:
    """Merge the JSON body or the form fields into one dictionary"""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    payload = {}
    for key in request.form.keys():
        if key in LIST_FIELDS or key.endswith('[]'):
            payload[key.rstrip('[]')] = request.form.getlist(key)
        else:
            payload[key] = request.form.get(key)
    return payload


def parse_payload(model: Type[ModelT]) -> ModelT:
    """Validate the request payload; raises pydantic.ValidationError"""
    return model.model_validate(request_payload())


def uploaded_file(name: str = 'file'):
    """The uploaded file for a form field, or None when absent or empty"""
    file = request.files.get(name)
    if file is None or not file.filename:
        return None
    return file


def column_values(payload: BaseModel) -> Dict[str, Any]:
    """Fields the client actually sent, with enums reduced to their values"""
    values = {}
    for key, value in payload.model_dump(exclude_unset=True).items():
        if isinstance(value, Enum):
            value = value.value
        values[key] = value
    return values
