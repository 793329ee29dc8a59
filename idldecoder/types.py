"""IDL type descriptions and Borsh decoding of values described by them."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from idldecoder.pubkey import PUBKEY_LENGTH, Pubkey


class DecodeError(ValueError):
    """Raised when bytes do not decode as the requested type."""


_INTEGERS = {
    "u8": struct.Struct("<B"),
    "u16": struct.Struct("<H"),
    "u32": struct.Struct("<I"),
    "u64": struct.Struct("<Q"),
    "i64": struct.Struct("<q"),
}

_PRIMITIVE_NAMES = {
    "u8": "u8",
    "u16": "u16",
    "u32": "u32",
    "u64": "u64",
    "i64": "i64",
    "bool": "bool",
    "pubkey": "Pubkey",
    "string": "String",
    "bytes": "Vec<u8>",
}

_UNIT_NAME = "()"
_LENGTH = struct.Struct("<I")


@dataclass(frozen=True)
class _StructDef:
    fields: tuple[tuple[str, Any], ...]


@dataclass(frozen=True)
class _EnumDef:
    variants: tuple[str, ...]


def _is_u64(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < 2**64


def _classify(spec: Any) -> tuple:
    """Reduce a type description to one of: prim, vec, array, defined, unit."""
    if isinstance(spec, str):
        return ("prim", spec) if spec in _PRIMITIVE_NAMES else ("unit",)
    if isinstance(spec, Mapping):
        if "vec" in spec:
            return ("vec", spec["vec"])
        if "array" in spec:
            array = spec["array"]
            if isinstance(array, list) and len(array) == 2 and _is_u64(array[1]):
                return ("array", array[0], array[1])
            return ("unit",)
        if "defined" in spec:
            defined = spec["defined"]
            if isinstance(defined, Mapping) and isinstance(defined.get("name"), str):
                return ("defined", defined["name"])
    return ("unit",)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def take(self, count: int) -> bytes:
        end = self._pos + count
        if end > len(self._data):
            raise DecodeError("unexpected end of data")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def unpack(self, layout: struct.Struct) -> int:
        return layout.unpack(self.take(layout.size))[0]


class TypeRegistry:
    """The custom types of an IDL, and decoding of any IDL type against them.

    Structs decode to dicts of field values in declaration order, enums to the
    name of the variant, ``pubkey`` to :class:`Pubkey`, ``bytes`` to bytes,
    vectors and arrays to lists. Unrecognised types decode to ``None`` and
    consume no bytes.
    """

    def __init__(self, type_defs: Iterable[Any] | None) -> None:
        self._names: set[str] = set()
        self._defs: dict[str, _StructDef | _EnumDef] = {}
        for type_def in type_defs or ():
            if not isinstance(type_def, Mapping):
                continue
            name = type_def.get("name")
            if not isinstance(name, str):
                continue
            self._names.add(name)
            info = type_def.get("type")
            if not isinstance(info, Mapping):
                continue
            kind = info.get("kind")
            if kind == "struct":
                fields = info.get("fields")
                self._defs[name] = _StructDef(
                    tuple(
                        (field["name"], field["type"])
                        for field in (fields if isinstance(fields, list) else ())
                        if isinstance(field, Mapping)
                        and isinstance(field.get("name"), str)
                        and "type" in field
                    )
                )
            elif kind == "enum":
                variants = info.get("variants")
                if isinstance(variants, list):
                    self._defs[name] = _EnumDef(
                        tuple(
                            variant["name"]
                            for variant in variants
                            if isinstance(variant, Mapping) and isinstance(variant.get("name"), str)
                        )
                    )

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def type_name(self, type_spec: Any) -> str:
        """Describe a type the way a declaration of it would be written."""
        kind = _classify(type_spec)
        tag = kind[0]
        if tag == "prim":
            return _PRIMITIVE_NAMES[kind[1]]
        if tag == "vec":
            return f"Vec<{self.type_name(kind[1])}>"
        if tag == "array":
            return f"[{self.type_name(kind[1])}; {kind[2]}]"
        if tag == "defined":
            name = kind[1]
            return name if name in self._names else f"crate::{name}"
        return _UNIT_NAME

    def decode(self, type_spec: Any, data: bytes) -> Any:
        """Decode ``data`` as one value of ``type_spec``; every byte must be used."""
        reader = _Reader(data)
        value = self._read(type_spec, reader)
        if reader.remaining:
            raise DecodeError(f"not all bytes read: {reader.remaining} left over")
        return value

    def decode_named(self, name: str, data: bytes) -> Any:
        """Decode ``data`` as the custom type ``name``; KeyError if it has no definition."""
        if name not in self._defs:
            raise KeyError(name)
        return self.decode({"defined": {"name": name}}, data)

    def _read(self, spec: Any, reader: _Reader) -> Any:
        kind = _classify(spec)
        tag = kind[0]
        if tag == "prim":
            return self._read_primitive(kind[1], reader)
        if tag == "vec":
            count = reader.unpack(_LENGTH)
            if count == 0:
                return []
            if self._is_zero_sized(kind[1]):
                raise DecodeError("vectors of zero-sized types are not allowed")
            return [self._read(kind[1], reader) for _ in range(count)]
        if tag == "array":
            return [self._read(kind[1], reader) for _ in range(kind[2])]
        if tag == "defined":
            return self._read_defined(kind[1], reader)
        return None

    def _read_primitive(self, name: str, reader: _Reader) -> Any:
        layout = _INTEGERS.get(name)
        if layout is not None:
            return reader.unpack(layout)
        if name == "bool":
            byte = reader.take(1)[0]
            if byte > 1:
                raise DecodeError(f"invalid bool representation: {byte}")
            return byte == 1
        if name == "pubkey":
            return Pubkey(reader.take(PUBKEY_LENGTH))
        length = reader.unpack(_LENGTH)
        raw = reader.take(length)
        if name == "bytes":
            return raw
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"invalid utf-8 in string: {exc}") from None

    def _read_defined(self, name: str, reader: _Reader) -> Any:
        definition = self._defs.get(name)
        if definition is None:
            raise DecodeError(f"type {name!r} has no decodable definition")
        if isinstance(definition, _StructDef):
            return {field: self._read(spec, reader) for field, spec in definition.fields}
        tag = reader.take(1)[0]
        if tag >= len(definition.variants):
            raise DecodeError(f"unexpected variant index {tag} for enum {name!r}")
        return definition.variants[tag]

    def _is_zero_sized(self, spec: Any, seen: frozenset[str] = frozenset()) -> bool:
        kind = _classify(spec)
        tag = kind[0]
        if tag == "unit":
            return True
        if tag == "array":
            return kind[2] == 0 or self._is_zero_sized(kind[1], seen)
        if tag == "defined":
            name = kind[1]
            definition = self._defs.get(name)
            if isinstance(definition, _EnumDef):
                return len(definition.variants) <= 1
            if isinstance(definition, _StructDef) and name not in seen:
                inner = seen | {name}
                return all(self._is_zero_sized(field, inner) for _, field in definition.fields)
        return False