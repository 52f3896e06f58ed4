"""Domain models returned by the user access façade."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

_WIRE_FIELDS = {
    "id": "id",
    "name": "name",
    "email": "email",
    "password": "password",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


class PayloadError(ValueError):
    """Raised when a response payload cannot be converted into a model."""


@dataclass(frozen=True)
class User:
    """Represents a user account as reported by the GraphQL service."""

    id: str
    name: str
    email: str
    password: str = field(repr=False)
    created_at: str
    updated_at: str

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "User":
        """Create a :class:`User` from a response object keyed by wire names."""
        if not isinstance(data, Mapping):
            raise PayloadError("User payload must be an object")

        missing = [wire for wire in _WIRE_FIELDS.values() if wire not in data]
        if missing:
            raise PayloadError(f"User payload is missing fields: {', '.join(missing)}")

        values: Dict[str, str] = {}
        for attribute, wire in _WIRE_FIELDS.items():
            value = data[wire]
            if not isinstance(value, str):
                raise PayloadError(f"User field '{wire}' must be a string")
            values[attribute] = value
        return User(**values)

    def to_dict(self) -> Dict[str, str]:
        """Return the wire representation of the user."""
        return {wire: getattr(self, attribute) for attribute, wire in _WIRE_FIELDS.items()}


def users_from_list(items: Any) -> List[User]:
    if not isinstance(items, list):
        raise PayloadError("User list payload must be an array")
    return [User.from_dict(item) for item in items]


__all__ = ["PayloadError", "User", "users_from_list"]
