"""
Request validation helpers shared by the endpoints.
"""

from pydantic import BaseModel

from app.exceptions import InvalidRangeError, ValidationError
from app.ledger.contracts.student_directory import MAX_PAGE_SIZE


def require_fields(body: BaseModel, *fields: str) -> None:
    """
    Fail fast when required body fields are missing or blank.

    Args:
        body: The parsed request body
        fields: Attribute names that must be present

    Raises:
        ValidationError: Listing every missing field by its wire name
    """
    missing = []
    for name in fields:
        value = getattr(body, name, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            field_info = type(body).model_fields.get(name)
            missing.append(field_info.alias if field_info and field_info.alias else name)

    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            field=missing[0],
        )


def check_page_bounds(start_index: int, count: int) -> None:
    if start_index < 0:
        raise InvalidRangeError("startIndex must be non-negative")
    if count < 1 or count > MAX_PAGE_SIZE:
        raise InvalidRangeError(f"count must be between 1 and {MAX_PAGE_SIZE}")
