"""Unit tests for contract introspection."""

from __future__ import annotations

import inspect
import typing as t

import pytest

from contract_mox.contract import Contract, MemberKind
from contract_mox.errors import ConfigurationError
from contract_mox.unittests._contracts import (
    Account,
    Calculator,
    Downloader,
    Fetcher,
    Greeter,
    Store,
    User,
    UserRepository,
    parse,
)


def test_abstract_class_members() -> None:
    """Methods, properties and their base implementations are discovered."""
    contract = Contract(UserRepository)

    get = contract.member("get")
    assert get.kind is MemberKind.METHOD
    assert get.arity == 1
    assert get.return_type == User | None
    assert not get.has_base

    size = contract.member("size")
    assert size.kind is MemberKind.GETTER
    assert size.return_type is int
    assert contract.find("size", MemberKind.SETTER) is not None

    label = contract.member("label")
    assert label.has_base
    assert sorted(contract.properties()) == ["label", "size"]
    assert contract.member("get") is get


def test_member_lookup_errors() -> None:
    """Unknown, unmockable and read-only members are rejected."""
    contract = Contract(UserRepository)
    with pytest.raises(ConfigurationError, match="static and class methods"):
        contract.member("version")
    with pytest.raises(ConfigurationError, match="no member named 'missing'"):
        contract.member("missing")
    with pytest.raises(ConfigurationError, match="read-only"):
        contract.member("label", MemberKind.SETTER)


def test_private_members_are_not_mockable() -> None:
    """Names starting with an underscore stay outside the contract."""
    contract = Contract(Calculator)
    with pytest.raises(ConfigurationError, match="private members"):
        contract.member("_internal")
    assert contract.member("add").has_base
    assert contract.accepts_constructor_args


def test_protocol_data_members() -> None:
    """Protocol annotations become read-write properties without a base."""
    contract = Contract(Greeter)
    greeting = contract.member("greeting")
    assert greeting.kind is MemberKind.GETTER
    assert greeting.return_type is str
    setter = contract.find("greeting", MemberKind.SETTER)
    assert setter is not None
    assert not setter.returns_value
    assert not contract.member("greet").has_base
    assert not contract.accepts_constructor_args


def test_class_fields_have_attribute_like_bases() -> None:
    """Annotated fields on concrete classes read and write instance state."""
    contract = Contract(Account)
    retries = contract.member("retries")
    setter = contract.find("retries", MemberKind.SETTER)
    balance = contract.member("balance")
    assert retries.is_field
    assert retries.base is not None
    assert setter is not None
    assert setter.base is not None
    assert balance.base is not None
    assert not Contract(Greeter).member("greeting").has_base

    holder = Calculator()
    assert retries.base(holder) == 3
    setter.base(holder, 5)
    assert retries.base(holder) == 5
    with pytest.raises(AttributeError, match="balance"):
        balance.base(holder)


def test_generic_contract_resolves_type_arguments() -> None:
    """Type variables in return annotations take the supplied arguments."""
    contract = Contract(Store[User])
    assert contract.type is Store
    assert contract.type_args == (User,)
    assert contract.member("load").return_type is User
    assert contract.display_name.endswith("Store[User]")


def test_function_contract() -> None:
    """Plain functions become a single ``__call__`` member with a base."""
    contract = Contract(parse)
    assert contract.is_delegate
    call = contract.member("__call__")
    assert [param.name for param in call.parameters] == ["text", "strict"]
    assert call.has_base
    assert call.base is not None
    assert call.base(None, "abc") == 3


def test_callable_alias_contract() -> None:
    """``Callable[[...], R]`` aliases produce positional-only parameters."""
    contract = Contract(t.Callable[[int, str], bool])
    call = contract.member("__call__")
    assert call.arity == 2
    assert call.return_type is bool
    assert all(
        param.kind is inspect.Parameter.POSITIONAL_ONLY for param in call.parameters
    )
    assert not call.has_base


def test_bind_applies_defaults_and_unbind_restores_call() -> None:
    """Binding snapshots one value per parameter; unbinding rebuilds the call."""
    contract = Contract(UserRepository)
    find = contract.member("find")
    values = find.bind(("bob",), {})
    assert values == ("bob", True)
    assert find.unbind(values) == (("bob",), {"active": True})
    with pytest.raises(TypeError):
        find.bind((), {})


def test_async_and_event_members() -> None:
    """Coroutine methods are flagged and event slots are listed."""
    assert Contract(Fetcher).member("fetch").is_async
    assert set(Contract(Downloader).events) == {"progress", "finished"}
    assert set(Contract(UserRepository).events) == {"changed"}


def test_non_callable_targets_are_rejected() -> None:
    """Only classes and callables can be mocked."""
    with pytest.raises(ConfigurationError, match="cannot mock"):
        Contract(42)
