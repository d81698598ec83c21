"""
Build API — Input Validation
==============================

The API has exactly one rule: an aggregate must have a name. It applies the
same way on create and update, and it runs before the store is touched.

Everything else is passed through untouched. Densities are not range
checked, categories are not enumerated and nothing is type-coerced.
"""

import re
from typing import Optional

from buildapi.exceptions import ValidationError
from buildapi.schemas.aggregate import AggregatePayload

NAME_REQUIRED = "Aggregate name is required"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def require_name(payload: Optional[AggregatePayload]) -> AggregatePayload:
    """
    Reject a body whose `name` is missing or falsy.

    Missing body, null, "", 0 and false all fail. Non-string truthy values
    (e.g. 42) are accepted and stored as given.

    Raises:
        ValidationError: with the fixed "Aggregate name is required" message.
    """
    if payload is None or not payload.name:
        raise ValidationError(message=NAME_REQUIRED, field="name")
    return payload


def parse_path_id(raw_id: str) -> Optional[int]:
    """
    Leading-integer parse of a path id, for echoing it back in responses.

        "12"    -> 12
        " 7"    -> 7
        "12abc" -> 12
        "abc"   -> None
    """
    match = _LEADING_INT.match(raw_id)
    if match is None:
        return None
    return int(match.group(1))
