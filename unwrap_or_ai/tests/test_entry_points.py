"""Orchestration entry points and recovery target inference."""
from __future__ import annotations

import asyncio
from typing import List, Optional

import pytest
from pydantic import BaseModel

from unwrap_or_ai.base.errors import OriginalFailureError, RecoveryAbortedError
from unwrap_or_ai.context import recoverable
from unwrap_or_ai.recovery import (
    Absent,
    Failure,
    Option,
    Present,
    RecoveryResolver,
    Result,
    Success,
    aresolve_or_recover,
    aunwrap_or_recover,
    infer_target,
    resolve_or_recover,
    set_default_resolver,
    unwrap_or_recover,
)
from unwrap_or_ai.recovery.entry import target_from_annotation
from unwrap_or_ai.tests.helpers import json_completion


class User(BaseModel):
    id: int
    name: str
    email: str


class NotFoundError(LookupError):
    pass


CALLS: List[int] = []


@recoverable
def fetch_user(user_id: int) -> Result[User, str]:
    """Load a user record from the primary database."""
    CALLS.append(user_id)
    return Failure(f"User with id {user_id} not found in database")


@recoverable
def find_user(user_id: int) -> Optional[User]:
    """Return the user or ``None`` when missing."""
    return None


@recoverable
def load_user(user_id: int) -> User:
    """Raise when the user does not exist."""
    raise NotFoundError(f"no user {user_id}")


def existing_user(user_id: int) -> Result[User, str]:
    return Success(User(id=user_id, name="John", email="john@example.com"))


async def afind_user(user_id: int) -> Option[User]:
    await asyncio.sleep(0)
    return Absent()


def untyped(x):
    return None


@pytest.fixture(autouse=True)
def _reset_calls():
    CALLS.clear()


def _user_payload(user_id: int = 999):
    return json_completion({"id": user_id, "name": "Jane Doe", "email": "jane@example.com"})


# ----- target inference -----


def test_target_inference_from_annotations():
    assert infer_target(fetch_user) is User  # nosec B101
    assert infer_target(find_user) is User  # nosec B101
    assert infer_target(load_user) is User  # nosec B101
    assert infer_target(afind_user) is User  # nosec B101
    assert infer_target(untyped) is None  # nosec B101


def test_target_from_annotation_shapes():
    assert target_from_annotation(Result[int, str]) is int  # nosec B101
    assert target_from_annotation(Option[List[int]]) == List[int]  # nosec B101
    assert target_from_annotation(Optional[float]) is float  # nosec B101
    assert target_from_annotation(Success[str]) is str  # nosec B101
    assert target_from_annotation(Result) is None  # nosec B101
    assert target_from_annotation(None) is None  # nosec B101


# ----- resolve_or_recover -----


def test_failure_is_recovered_and_function_called_once(recorder, make_client):
    recorder.reply_json(_user_payload())
    resolver = RecoveryResolver(make_client())

    outcome = resolve_or_recover(fetch_user, 999, resolver=resolver)

    assert outcome == Success(User(id=999, name="Jane Doe", email="jane@example.com"))  # nosec B101
    assert CALLS == [999]  # nosec B101
    prompt = recorder.last_json()["messages"][1]["content"]
    assert "fetch_user(999)" in prompt  # nosec B101
    assert "User with id 999 not found in database" in prompt  # nosec B101
    assert "Load a user record from the primary database." in prompt  # nosec B101


def test_none_becomes_present_after_recovery(recorder, make_client):
    recorder.reply_json(_user_payload(5))
    outcome = resolve_or_recover(find_user, 5, resolver=RecoveryResolver(make_client()))
    assert isinstance(outcome, Present)  # nosec B101
    assert outcome.value.id == 5  # nosec B101


def test_raised_exception_becomes_failure_then_success(recorder, make_client):
    recorder.reply_json(_user_payload(7))
    outcome = resolve_or_recover(load_user, 7, resolver=RecoveryResolver(make_client()))
    assert isinstance(outcome, Success)  # nosec B101
    assert "NotFoundError: no user 7" in recorder.last_json()["messages"][1]["content"]  # nosec B101


def test_success_never_touches_the_backend(recorder, make_client):
    outcome = resolve_or_recover(existing_user, 1, resolver=RecoveryResolver(make_client()))
    assert outcome == Success(User(id=1, name="John", email="john@example.com"))  # nosec B101
    assert recorder.count == 0  # nosec B101


def _refuse(*_args, **_kwargs):
    raise AssertionError("recovery machinery used on a successful call")


def test_success_does_not_build_the_default_resolver(monkeypatch):
    from unwrap_or_ai.recovery import entry

    monkeypatch.setenv("UNWRAP_OR_AI_BACKEND", "bogus")
    monkeypatch.setenv("UNWRAP_OR_AI_POLICY", "bogus")
    monkeypatch.setattr(entry, "infer_target", _refuse)
    monkeypatch.setattr(entry, "call_context_factory", _refuse)

    outcome = resolve_or_recover(existing_user, 7)
    assert outcome == Success(User(id=7, name="John", email="john@example.com"))  # nosec B101
    assert unwrap_or_recover(existing_user, 7).id == 7  # nosec B101
    assert entry._DEFAULT_RESOLVER is None  # nosec B101


def test_async_success_does_not_build_the_default_resolver(monkeypatch):
    from unwrap_or_ai.recovery import entry

    monkeypatch.setenv("UNWRAP_OR_AI_BACKEND", "bogus")
    monkeypatch.setattr(entry, "infer_target", _refuse)

    async def present_user() -> Option[User]:
        return Present(User(id=2, name="Ann", email="ann@example.com"))

    outcome = asyncio.run(aresolve_or_recover(present_user))
    assert outcome == Present(User(id=2, name="Ann", email="ann@example.com"))  # nosec B101
    assert entry._DEFAULT_RESOLVER is None  # nosec B101


def test_explicit_target_overrides_annotation(recorder, make_client):
    recorder.reply_json(json_completion({"value": 3}))
    outcome = resolve_or_recover(untyped, "x", target=int, resolver=RecoveryResolver(make_client()))
    assert outcome == Present(3)  # nosec B101


def test_default_resolver_can_be_replaced(recorder, make_client):
    set_default_resolver(RecoveryResolver(make_client()))
    recorder.reply_json(_user_payload())

    assert isinstance(resolve_or_recover(fetch_user, 999), Success)  # nosec B101


def test_missing_key_with_default_configuration_returns_original():
    outcome = resolve_or_recover(fetch_user, 999)
    assert outcome == Failure("User with id 999 not found in database")  # nosec B101


# ----- unwrap_or_recover -----


def test_unwrap_returns_recovered_value(recorder, make_client):
    recorder.reply_json(_user_payload())
    user = unwrap_or_recover(fetch_user, 999, resolver=RecoveryResolver(make_client()))
    assert user == User(id=999, name="Jane Doe", email="jane@example.com")  # nosec B101


def test_unwrap_reraises_original_exception(make_client):
    resolver = RecoveryResolver(make_client(api_key=None))
    with pytest.raises(NotFoundError, match="no user 3"):
        unwrap_or_recover(load_user, 3, resolver=resolver)


def test_unwrap_raises_original_failure_error_for_plain_reasons(make_client):
    resolver = RecoveryResolver(make_client(api_key=None))
    with pytest.raises(OriginalFailureError) as info:
        unwrap_or_recover(fetch_user, 999, resolver=resolver)
    assert info.value.reason == "User with id 999 not found in database"  # nosec B101


def test_unwrap_returns_none_for_unrecovered_absence(make_client):
    resolver = RecoveryResolver(make_client(api_key=None))
    assert unwrap_or_recover(find_user, 1, resolver=resolver) is None  # nosec B101


def test_unwrap_under_abort_policy(make_client):
    resolver = RecoveryResolver(make_client(api_key=None), policy="abort")
    with pytest.raises(RecoveryAbortedError) as info:
        unwrap_or_recover(load_user, 3, resolver=resolver)
    assert isinstance(info.value.reason, NotFoundError)  # nosec B101


# ----- async -----


def test_async_entry_points(recorder, make_client):
    recorder.reply_json(_user_payload(8))
    resolver = RecoveryResolver(make_client())

    outcome = asyncio.run(aresolve_or_recover(afind_user, 8, resolver=resolver))

    assert isinstance(outcome, Present)  # nosec B101
    assert outcome.value.id == 8  # nosec B101


def test_async_unwrap_accepts_sync_functions(recorder, make_client):
    recorder.reply_json(_user_payload())
    resolver = RecoveryResolver(make_client())

    user = asyncio.run(aunwrap_or_recover(fetch_user, 999, resolver=resolver))

    assert user.name == "Jane Doe"  # nosec B101


def test_cancelling_async_recovery_abandons_the_request(make_client):
    import httpx

    started: List[asyncio.Event] = []

    async def slow_handler(request: httpx.Request) -> httpx.Response:
        started[0].set()
        await asyncio.sleep(10)
        return httpx.Response(200, json=_user_payload())

    async def scenario():
        started.append(asyncio.Event())
        client = make_client(async_http_client=httpx.AsyncClient(transport=httpx.MockTransport(slow_handler)))
        task = asyncio.create_task(aresolve_or_recover(afind_user, 1, resolver=RecoveryResolver(client)))
        await started[0].wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
