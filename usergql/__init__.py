"""Typed GraphQL access layer for the ``User`` entity."""

from __future__ import annotations

from typing import Any

from .facade import UserFacade, build_namespaces
from .models import User
from .results import Err, ErrorKind, FacadeError, Ok, Result


def create_http_client(*args: Any, **kwargs: Any):
    """Factory function that returns an ``httpx``-backed GraphQL client."""

    from .client import HTTPGraphQLClient

    return HTTPGraphQLClient(*args, **kwargs)


__all__ = [
    "Err",
    "ErrorKind",
    "FacadeError",
    "Ok",
    "Result",
    "User",
    "UserFacade",
    "build_namespaces",
    "create_http_client",
]
