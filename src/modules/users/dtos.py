"""User DTOs for the Service Layer.

- ``SignupDTO``: self-service registration input.
- ``build_signup_dto``: collapses pydantic errors into ``InvalidUserData``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from modules.users.exceptions import InvalidUserData


class SignupDTO(BaseModel):
    """Immutable DTO for signup requests.

    Validates:
    - ``username`` is 3-150 characters of letters, digits and ``@.+-_``.
    - ``password`` is at least 8 characters.
    - ``age`` is at least 1.
    - ``mobile_number`` is exactly 10 digits.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    username: str = Field(min_length=3, max_length=150, pattern=r"^[\w.@+-]+$")
    password: str = Field(min_length=8, max_length=128)
    age: int = Field(ge=1, le=150)
    mobile_number: str = Field(pattern=r"^\d{10}$")
    email: str = ""


def build_signup_dto(payload: Dict[str, Any]) -> SignupDTO:
    """Raises:
    InvalidUserData: one message per failing field.
    """
    if not isinstance(payload, Mapping):
        raise InvalidUserData(["Request body must be a JSON object."])
    data = {key: payload.get(key) for key in SignupDTO.model_fields if key in payload}
    try:
        return SignupDTO(**data)
    except ValidationError as exc:
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"])
            messages.append(f"{location}: {error['msg']}" if location else error["msg"])
        raise InvalidUserData(messages) from exc
