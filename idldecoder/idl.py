"""Parsed form of a program IDL: instructions, accounts, events and types."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any, TypeVar

from idldecoder.naming import to_camel_case
from idldecoder.pubkey import Pubkey
from idldecoder.types import TypeRegistry

DISCRIMINATOR_LENGTH = 8

T = TypeVar("T")


class IdlError(ValueError):
    """Raised when an IDL document is missing something or is malformed."""


@dataclass(frozen=True)
class AccountsLayout:
    """Names of the accounts an instruction takes, with their positions."""

    entries: tuple[tuple[str, int], ...] = ()

    def account_name(self, index: int) -> str | None:
        """Name of the account at ``index``, or None if there is none."""
        return next((name for name, position in self.entries if position == index), None)

    def account_index(self, name: str) -> int | None:
        """Position of the account called ``name``, or None if there is none."""
        return next((position for entry, position in self.entries if entry == name), None)

    def all_accounts(self) -> tuple[tuple[str, int], ...]:
        """Every named account as ``(name, index)`` pairs, in IDL order."""
        return self.entries

    def map_accounts(self, accounts: Iterable[T]) -> dict[str, T]:
        """Pair the accounts passed to an instruction with their names.

        Accounts at positions without a name are left out.
        """
        mapped: dict[str, T] = {}
        for index, account in enumerate(accounts):
            name = self.account_name(index)
            if name is not None:
                mapped[name] = account
        return mapped


@dataclass(frozen=True)
class InstructionDef:
    """One instruction: its discriminator, arguments and accounts."""

    name: str
    discriminator: bytes
    args: tuple[tuple[str, Any], ...] = ()
    accounts: AccountsLayout = field(default_factory=AccountsLayout)

    @property
    def struct_name(self) -> str:
        """The CamelCase name the decoded instruction goes by."""
        return to_camel_case(self.name)


@dataclass(frozen=True)
class DiscriminatedDef:
    """An account or event: the type it decodes as and its discriminator."""

    name: str
    discriminator: bytes


def _require_str(obj: Mapping[str, Any], key: str, what: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str):
        raise IdlError(f"{what} has no string {key!r}")
    return value


def _require_list(obj: Mapping[str, Any], key: str, what: str) -> list[Any]:
    value = obj.get(key)
    if not isinstance(value, list):
        raise IdlError(f"{what}: {key!r} missing or not an array")
    return value


def _parse_discriminator(values: list[Any], what: str) -> bytes:
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < 2**64:
            raise IdlError(f"{what}: discriminator holds {value!r}, not an unsigned integer")
    return bytes(value & 0xFF for value in values)


def _parse_accounts(raw: Any) -> AccountsLayout:
    if not isinstance(raw, list):
        return AccountsLayout()
    return AccountsLayout(
        tuple(
            (account["name"], index)
            for index, account in enumerate(raw)
            if isinstance(account, Mapping) and isinstance(account.get("name"), str)
        )
    )


def _parse_arg(raw: Any, instruction: str) -> tuple[str, Any]:
    what = f"argument of instruction {instruction!r}"
    if not isinstance(raw, Mapping):
        raise IdlError(f"{what} is not an object")
    name = _require_str(raw, "name", what)
    if "type" not in raw:
        raise IdlError(f"missing type in argument {name!r} of instruction {instruction!r}")
    return name, raw["type"]


def _parse_instruction(raw: Any) -> InstructionDef:
    if not isinstance(raw, Mapping):
        raise IdlError("instruction is not an object")
    name = _require_str(raw, "name", "instruction")
    what = f"instruction {name!r}"
    discriminator = _parse_discriminator(_require_list(raw, "discriminator", what), what)
    if len(discriminator) != DISCRIMINATOR_LENGTH:
        raise IdlError(
            f"{what}: discriminator must be {DISCRIMINATOR_LENGTH} bytes, "
            f"got {len(discriminator)}"
        )
    args = tuple(_parse_arg(arg, name) for arg in _require_list(raw, "args", what))
    return InstructionDef(name, discriminator, args, _parse_accounts(raw.get("accounts")))


def _parse_discriminated(raw: Any, kind: str) -> DiscriminatedDef:
    if not isinstance(raw, Mapping):
        raise IdlError(f"{kind} is not an object")
    name = _require_str(raw, "name", kind)
    what = f"{kind} {name!r}"
    return DiscriminatedDef(
        name, _parse_discriminator(_require_list(raw, "discriminator", what), what)
    )


@dataclass(frozen=True)
class Idl:
    """A whole program IDL."""

    address: Pubkey
    instructions: tuple[InstructionDef, ...]
    accounts: tuple[DiscriminatedDef, ...] = ()
    events: tuple[DiscriminatedDef, ...] = ()
    type_defs: tuple[Any, ...] = ()
    types: TypeRegistry = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", TypeRegistry(self.type_defs))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Idl:
        """Build an IDL from its parsed JSON document."""
        if not isinstance(data, Mapping):
            raise IdlError("IDL document is not an object")
        raw_types = data.get("types")
        type_defs = tuple(raw_types) if isinstance(raw_types, list) else ()
        raw_instructions = data.get("instructions")
        if not isinstance(raw_instructions, list):
            raise IdlError("IDL does not contain an 'instructions' array")
        instructions = tuple(_parse_instruction(inst) for inst in raw_instructions)
        raw_accounts = data.get("accounts")
        accounts = tuple(
            _parse_discriminated(account, "account")
            for account in (raw_accounts if isinstance(raw_accounts, list) else ())
        )
        raw_events = data.get("events")
        events = tuple(
            _parse_discriminated(event, "event")
            for event in (raw_events if isinstance(raw_events, list) else ())
        )
        address = data.get("address")
        if not isinstance(address, str):
            raise IdlError("IDL missing program address")
        try:
            program = Pubkey.from_base58(address)
        except ValueError as exc:
            raise IdlError(f"invalid program address {address!r}: {exc}") from None
        idl = cls(program, instructions, accounts, events, type_defs)
        for definition in (*accounts, *events):
            if definition.name not in idl.types:
                raise IdlError(f"type {definition.name!r} is not defined under 'types'")
        return idl

    @classmethod
    def from_json(cls, text: str) -> Idl:
        """Build an IDL from JSON text."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise IdlError(f"invalid JSON in IDL: {exc}") from None
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: str | PathLike[str]) -> Idl:
        """Read and parse an IDL file."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise IdlError(f"unable to read IDL file at {path}: {exc}") from exc
        return cls.from_json(text)

    def instruction(self, name: str) -> InstructionDef:
        """The instruction called ``name`` in the IDL; KeyError if absent."""
        found = next((inst for inst in self.instructions if inst.name == name), None)
        if found is None:
            raise KeyError(name)
        return found