"""Typed access to the ``User`` operations of a GraphQL service.

Every operation returns a :data:`~usergql.results.Result` instead of raising.
The outcome of a round trip is classified in a fixed order:

1. a non-empty ``errors`` collection becomes a server error, even when
   ``data`` is present as well;
2. a missing ``data`` payload, or a missing/``null`` operation field, becomes
   a malformed-response error;
3. anything else is converted into the model and returned as :class:`Ok`.

Exceptions raised by the client surface as transport errors.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Mapping, Optional, Tuple, TypeVar

from . import documents
from .models import PayloadError, User, users_from_list
from .results import Err, FacadeError, Ok, Result

if TYPE_CHECKING:
    from .client import GraphQLClient

logger = logging.getLogger("usergql.facade")

T = TypeVar("T")

Operation = Callable[..., Awaitable[Result]]


def _response_parts(response: Any) -> Tuple[Any, Any]:
    """Return ``(data, errors)`` from a response object or a plain mapping."""

    if isinstance(response, Mapping):
        return response.get("data"), response.get("errors")
    return getattr(response, "data", None), getattr(response, "errors", None)


def classify_response(
    operation: str,
    response: Any,
    convert: Callable[[Any], T],
) -> Result:
    """Turn a raw client response into a result for ``operation``."""

    data, errors = _response_parts(response)

    if errors:
        logger.warning("%s returned %d server error(s)", operation, len(errors))
        return Err(FacadeError.server(errors))

    if not isinstance(data, Mapping) or data.get(operation) is None:
        logger.warning("%s returned no '%s' field", operation, operation)
        return Err(FacadeError.malformed())

    try:
        value = convert(data[operation])
    except PayloadError as exc:
        logger.warning("%s returned an unusable payload: %s", operation, exc)
        return Err(FacadeError.malformed(str(exc)))
    return Ok(value)


def _unchanged(value: Any) -> Any:
    return value


async def execute_operation(
    client: GraphQLClient,
    method: str,
    operation: str,
    document: str,
    variables: Mapping[str, Any],
    convert: Callable[[Any], Any] = _unchanged,
) -> Result:
    """Send ``document`` through ``client.<method>`` and classify the outcome.

    ``method`` is ``"query"`` or ``"mutate"``. Never raises ``Exception``.
    """

    # Variables are not logged: they may carry a password.
    logger.debug("Dispatching %s", operation)
    try:
        send = getattr(client, method)
        response = await send(document, variables)
        return classify_response(operation, response, convert)
    except Exception as exc:
        logger.warning("%s failed: %s", operation, exc)
        return Err(FacadeError.transport(exc))


class UserFacade:
    """Create, read, update and delete users through an injected client.

    The façade keeps no state of its own and never closes ``client``; the
    caller owns the client's lifetime.
    """

    def __init__(self, client: GraphQLClient) -> None:
        self._client = client
        self._query: Mapping[str, Operation] = MappingProxyType(
            {
                "user": self.user,
                "users": self.users,
            }
        )
        self._mutation: Mapping[str, Operation] = MappingProxyType(
            {
                "createUser": self.create_user,
                "deleteUser": self.delete_user,
                "updateUser": self.update_user,
            }
        )

    @property
    def query(self) -> Mapping[str, Operation]:
        """Read operations keyed by GraphQL field name."""
        return self._query

    @property
    def mutation(self) -> Mapping[str, Operation]:
        """Write operations keyed by GraphQL field name."""
        return self._mutation

    async def create_user(self, name: str, email: str, password: str) -> Result:
        variables = {"name": name, "email": email, "password": password}
        return await self._dispatch(
            "mutate", "createUser", documents.CREATE_USER, variables, User.from_dict
        )

    async def delete_user(self, id: str) -> Result:
        return await self._dispatch(
            "mutate", "deleteUser", documents.DELETE_USER, {"id": id}, User.from_dict
        )

    async def update_user(
        self,
        id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Result:
        """Update a user; arguments left as ``None`` are not sent."""

        variables: Dict[str, Any] = {"id": id}
        for key, value in (("name", name), ("email", email), ("password", password)):
            if value is not None:
                variables[key] = value
        return await self._dispatch(
            "mutate", "updateUser", documents.UPDATE_USER, variables, User.from_dict
        )

    async def user(self, id: str) -> Result:
        return await self._dispatch(
            "query", "user", documents.USER, {"id": id}, User.from_dict
        )

    async def users(self) -> Result:
        return await self._dispatch(
            "query", "users", documents.USERS, {}, users_from_list
        )

    async def _dispatch(
        self,
        method: str,
        operation: str,
        document: str,
        variables: Dict[str, Any],
        convert: Callable[[Any], Any],
    ) -> Result:
        return await execute_operation(self._client, method, operation, document, variables, convert)


def build_namespaces(client: GraphQLClient) -> Tuple[Mapping[str, Operation], Mapping[str, Operation]]:
    """Return the ``(query, mutation)`` namespaces bound to ``client``."""

    facade = UserFacade(client)
    return facade.query, facade.mutation


__all__ = [
    "Operation",
    "UserFacade",
    "build_namespaces",
    "classify_response",
    "execute_operation",
]
