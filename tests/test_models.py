from __future__ import annotations

import pytest

from usergql.models import PayloadError, User, users_from_list
from usergql.results import Err, ErrorKind, FacadeError, Ok, OperationError


def _payload(**overrides: object) -> dict:
    payload = {
        "id": "u1",
        "name": "Ada",
        "email": "ada@example.com",
        "password": "hunter2",
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-02T00:00:00Z",
    }
    payload.update(overrides)
    return payload


def test_user_from_dict_maps_wire_names() -> None:
    user = User.from_dict(_payload())

    assert user.created_at == "2024-01-01T00:00:00Z"
    assert user.updated_at == "2024-01-02T00:00:00Z"
    assert user.to_dict() == _payload()


def test_user_repr_hides_password() -> None:
    user = User.from_dict(_payload())

    assert "hunter2" not in repr(user)
    assert "ada@example.com" in repr(user)


def test_user_from_dict_rejects_non_string_values() -> None:
    with pytest.raises(PayloadError):
        User.from_dict(_payload(id=7))


def test_user_from_dict_rejects_non_objects() -> None:
    with pytest.raises(PayloadError):
        User.from_dict(["u1"])  # type: ignore[arg-type]


def test_users_from_list_requires_array() -> None:
    with pytest.raises(PayloadError):
        users_from_list({"id": "u1"})
    assert users_from_list([]) == []


def test_ok_and_err_pairs() -> None:
    ok = Ok("value")
    err = Err(FacadeError.malformed())

    assert ok.is_ok and not err.is_ok
    assert ok.as_pair() == ("value", None)
    assert err.as_pair() == (None, err.error)
    assert ok.unwrap() == "value"
    with pytest.raises(ValueError):
        err.unwrap()


def test_server_error_without_message_gets_generic_text() -> None:
    error = FacadeError.server(["opaque"])

    assert error.kind is ErrorKind.SERVER
    assert error.errors == ("opaque",)
    assert error.message == "The GraphQL service reported an error"


def test_transport_error_keeps_cause() -> None:
    cause = TimeoutError()
    error = FacadeError.transport(cause)

    assert error.cause is cause
    assert str(error) == "TimeoutError"


@pytest.mark.parametrize(
    "errors, expected",
    [
        ("boom", ("boom",)),
        ({"message": "bad input"}, ({"message": "bad input"},)),
        (({"message": "first"}, {"message": "second"}), ({"message": "first"}, {"message": "second"})),
    ],
)
def test_server_error_keeps_non_list_errors_whole(errors: object, expected: tuple) -> None:
    error = FacadeError.server(errors)

    assert error.errors == expected


def test_server_error_object_supplies_message() -> None:
    assert FacadeError.server({"message": "bad input"}).message == "bad input"


def test_err_unwrap_raises_operation_error_with_cause() -> None:
    cause = ConnectionError("refused")
    err = Err(FacadeError.transport(cause))

    with pytest.raises(OperationError) as excinfo:
        err.unwrap()

    assert excinfo.value.error is err.error
    assert excinfo.value.__cause__ is cause
    assert str(excinfo.value) == "transport: refused"
