"""GraphQL client used by the façade, backed by ``httpx``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol

import httpx

from .config import ClientConfig

logger = logging.getLogger("usergql.client")


class GraphQLTransportError(RuntimeError):
    """Raised when the GraphQL endpoint cannot be reached or answers garbage."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class GraphQLResponse:
    """A decoded GraphQL response body."""

    data: Optional[Dict[str, Any]] = None
    errors: Optional[List[Any]] = None

    @staticmethod
    def from_payload(payload: object) -> "GraphQLResponse":
        if not isinstance(payload, dict):
            raise GraphQLTransportError("GraphQL endpoint returned an unexpected response payload")
        data = payload.get("data")
        errors = payload.get("errors")
        return GraphQLResponse(
            data=data if isinstance(data, dict) else None,
            errors=list(errors) if isinstance(errors, list) else None,
        )


class GraphQLClient(Protocol):
    """Minimal interface the façade needs from a GraphQL client."""

    async def query(self, document: str, variables: Mapping[str, Any]) -> GraphQLResponse:
        ...

    async def mutate(self, document: str, variables: Mapping[str, Any]) -> GraphQLResponse:
        ...


def _normalize_endpoint(endpoint: str) -> str:
    cleaned = (endpoint or "").strip()
    if not cleaned:
        raise ValueError("GraphQL endpoint must not be empty")
    return cleaned


def _is_graphql_body(payload: object) -> bool:
    return isinstance(payload, dict) and ("errors" in payload or "data" in payload)


class HTTPGraphQLClient:
    """Send GraphQL operations as JSON ``POST`` requests.

    The underlying :class:`httpx.AsyncClient` is created lazily and closed by
    :meth:`aclose` or when leaving ``async with``. Pass ``transport`` to route
    requests somewhere other than the network.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        token: str | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float = 30.0,
        verify: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = _normalize_endpoint(endpoint)
        request_headers: Dict[str, str] = {"Accept": "application/json"}
        if headers:
            request_headers.update({str(key): str(value) for key, value in headers.items()})
        if token and token.strip():
            request_headers["Authorization"] = f"Bearer {token.strip()}"
        self._headers = request_headers
        self._timeout = timeout
        self._verify = verify
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HTTPGraphQLClient":
        return cls(
            config.endpoint,
            token=config.token,
            headers=config.headers,
            timeout=config.timeout,
            verify=config.verify,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def query(self, document: str, variables: Mapping[str, Any]) -> GraphQLResponse:
        return await self._execute(document, variables)

    async def mutate(self, document: str, variables: Mapping[str, Any]) -> GraphQLResponse:
        return await self._execute(document, variables)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HTTPGraphQLClient":
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self._headers,
                timeout=self._timeout,
                verify=self._verify,
                transport=self._transport,
            )
        return self._client

    async def _execute(self, document: str, variables: Mapping[str, Any]) -> GraphQLResponse:
        payload: Dict[str, Any] = {"query": document, "variables": dict(variables)}
        operation_name = _operation_name(document)
        if operation_name:
            payload["operationName"] = operation_name

        logger.debug("POST %s (%s)", self._endpoint, operation_name or "anonymous")
        try:
            response = await self._get_client().post(self._endpoint, json=payload)
        except httpx.HTTPError as exc:
            raise GraphQLTransportError(f"Failed to contact GraphQL endpoint: {exc}") from exc

        try:
            parsed = response.json()
        except ValueError:
            parsed = None

        if response.status_code >= 400:
            # GraphQL servers often answer validation errors with a 4xx and a normal body.
            if _is_graphql_body(parsed):
                return GraphQLResponse.from_payload(parsed)
            if response.status_code == 401:
                raise GraphQLTransportError(
                    "Authentication with the GraphQL endpoint failed", status_code=401
                )
            if response.status_code == 403:
                raise GraphQLTransportError(
                    "The GraphQL endpoint denied access", status_code=403
                )
            raise GraphQLTransportError(
                f"GraphQL request failed with status {response.status_code}",
                status_code=response.status_code,
            )

        if parsed is None:
            raise GraphQLTransportError(
                "GraphQL endpoint returned an invalid response", status_code=response.status_code
            )
        return GraphQLResponse.from_payload(parsed)


def _operation_name(document: str) -> str | None:
    header = document.lstrip().split("{", 1)[0]
    parts = header.replace("(", " ").split()
    if len(parts) >= 2 and parts[0] in ("query", "mutation", "subscription"):
        return parts[1]
    return None


__all__ = [
    "GraphQLClient",
    "GraphQLResponse",
    "GraphQLTransportError",
    "HTTPGraphQLClient",
]
