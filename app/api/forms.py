"""
Request Body Helpers

Bodies are read inside the handler rather than declared as parameters, so
rate limiting and authentication run before any parsing. Malformed bodies
therefore still spend a token.
"""
from typing import Any, Optional, Type, TypeVar
from fastapi import HTTPException, Request
from pydantic import BaseModel, ValidationError

FormModel = TypeVar("FormModel", bound=BaseModel)


async def read_json(request: Request) -> Any:
    """Parsed JSON body, or None when it is empty or not JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


async def read_json_object(request: Request) -> dict:
    """JSON body as a dict ({} for anything that is not a JSON object)."""
    payload = await read_json(request)
    return payload if isinstance(payload, dict) else {}


def validation_message(exc: ValidationError) -> str:
    """Human-readable message for the first validation error."""
    error = exc.errors()[0]
    message = error.get("msg", "Invalid form data")
    if message.startswith("Value error, "):
        return message[len("Value error, "):]

    field = ".".join(str(part) for part in error.get("loc", ()))
    return f"{field}: {message}" if field else message


def parse_form(model: Type[FormModel], payload: Any, message: Optional[str] = None) -> FormModel:
    """
    Validate a payload into a form model.

    Raises:
        HTTPException: 400 with `message`, or the first validation error
    """
    try:
        return model.model_validate(payload if payload is not None else {})
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=message or validation_message(e))
