"""Matching raw instruction, account and event data against an IDL."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from idldecoder.idl import DISCRIMINATOR_LENGTH, DiscriminatedDef, Idl, InstructionDef
from idldecoder.types import DecodeError, TypeRegistry

# Discriminator of the self-invoked instruction some programs use to emit events.
EMIT_CPI_INSTRUCTION_DISCRIMINATOR = bytes([228, 69, 165, 46, 81, 203, 154, 29])
EMIT_CPI = "EmitCpi"


@dataclass(frozen=True)
class DecodedEvent:
    """An event: the name of its type and its decoded value."""

    name: str
    data: Any


@dataclass(frozen=True)
class DecodedAccount:
    """Account data: the name of its type and its decoded value."""

    name: str
    data: Any


@dataclass(frozen=True)
class DecodedInstruction:
    """A decoded instruction.

    ``name`` is the CamelCase instruction name, or ``EmitCpi`` for an event
    emitted through self-invocation, in which case ``event`` holds the event.
    """

    name: str
    args: dict[str, Any] = field(default_factory=dict)
    event: DecodedEvent | None = None
    definition: InstructionDef | None = field(default=None, compare=False, repr=False)


class Decoder:
    """Decodes instruction, account and event data of one program."""

    def __init__(self, idl: Idl) -> None:
        self.idl = idl
        synthetic = []
        entries: list[tuple[InstructionDef, str | None]] = []
        for position, inst in enumerate(idl.instructions):
            if not inst.args:
                entries.append((inst, None))
                continue
            key = f"#args{position}"
            synthetic.append(
                {
                    "name": key,
                    "type": {
                        "kind": "struct",
                        "fields": [{"name": name, "type": spec} for name, spec in inst.args],
                    },
                }
            )
            entries.append((inst, key))
        self._instructions = tuple(entries)
        self._args = TypeRegistry([*idl.type_defs, *synthetic])

    def decode_instruction(self, data: bytes) -> DecodedInstruction | None:
        """Decode instruction data, or return None if nothing matches."""
        data = bytes(data)
        if len(data) < DISCRIMINATOR_LENGTH:
            return None
        disc, payload = data[:DISCRIMINATOR_LENGTH], data[DISCRIMINATOR_LENGTH:]
        for inst, key in self._instructions:
            if disc != inst.discriminator:
                continue
            if key is None:
                return DecodedInstruction(inst.struct_name, {}, definition=inst)
            try:
                args = self._args.decode_named(key, payload)
            except DecodeError:
                continue
            return DecodedInstruction(inst.struct_name, args, definition=inst)
        if disc == EMIT_CPI_INSTRUCTION_DISCRIMINATOR:
            event = self.decode_event(payload)
            if event is not None:
                return DecodedInstruction(EMIT_CPI, event=event)
        return None

    def decode_account(self, data: bytes) -> DecodedAccount | None:
        """Decode account data, or return None if nothing matches."""
        match = self._match(self.idl.accounts, data)
        return None if match is None else DecodedAccount(*match)

    def decode_event(self, data: bytes) -> DecodedEvent | None:
        """Decode event data, or return None if nothing matches."""
        match = self._match(self.idl.events, data)
        return None if match is None else DecodedEvent(*match)

    def _match(
        self, definitions: tuple[DiscriminatedDef, ...], data: bytes
    ) -> tuple[str, Any] | None:
        data = bytes(data)
        if len(data) < DISCRIMINATOR_LENGTH:
            return None
        disc, payload = data[:DISCRIMINATOR_LENGTH], data[DISCRIMINATOR_LENGTH:]
        for definition in definitions:
            if disc != definition.discriminator:
                continue
            try:
                return definition.name, self.idl.types.decode_named(definition.name, payload)
            except (DecodeError, KeyError):
                continue
        return None