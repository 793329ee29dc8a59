"""Command line front end: decode program data against an IDL file."""

from __future__ import annotations

import argparse
import base64
import json
import sys
from collections.abc import Mapping, Sequence
from typing import Any

from idldecoder.decoder import DecodedAccount, DecodedEvent, DecodedInstruction, Decoder
from idldecoder.idl import Idl, IdlError
from idldecoder.pubkey import Pubkey, b58decode

_INPUT_DECODERS = {
    "hex": bytes.fromhex,
    "base58": b58decode,
    "base64": lambda text: base64.b64decode(text, validate=True),
}


def _jsonable(value: Any) -> Any:
    if isinstance(value, Pubkey):
        return value.to_base58()
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, Mapping):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    return value


def _render(result: DecodedInstruction | DecodedAccount | DecodedEvent) -> dict[str, Any]:
    if isinstance(result, DecodedInstruction):
        if result.event is not None:
            return {"instruction": result.name, "event": _render(result.event)}
        return {"instruction": result.name, "args": _jsonable(result.args)}
    if isinstance(result, DecodedAccount):
        return {"account": result.name, "data": _jsonable(result.data)}
    return {"event": result.name, "data": _jsonable(result.data)}


def _describe(idl: Idl) -> str:
    lines = [f"program {idl.address}"]
    for inst in idl.instructions:
        args = ", ".join(f"{name}: {idl.types.type_name(spec)}" for name, spec in inst.args)
        lines.append(f"instruction {inst.struct_name}({args})")
    lines.extend(f"account {account.name}" for account in idl.accounts)
    lines.extend(f"event {event.name}" for event in idl.events)
    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idldecoder", description="Decode program data using an IDL file."
    )
    parser.add_argument("idl", help="path of the IDL JSON file")
    commands = parser.add_subparsers(dest="command", required=True)
    for kind in ("instruction", "account", "event"):
        sub = commands.add_parser(kind, help=f"decode {kind} data")
        sub.add_argument("data", help="the raw data")
        sub.add_argument("--encoding", choices=sorted(_INPUT_DECODERS), default="hex")
    commands.add_parser("describe", help="list what the IDL defines")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command; returns 0 on success, 1 when nothing matches, 2 on bad input."""
    args = _build_parser().parse_args(argv)
    try:
        idl = Idl.load(args.idl)
    except IdlError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    if args.command == "describe":
        print(_describe(idl))
        return 0
    try:
        data = _INPUT_DECODERS[args.encoding](args.data)
    except ValueError as exc:
        print(f"error: cannot read {args.encoding} data: {exc}", file=sys.stderr)
        return 2
    decoder = Decoder(idl)
    decode = {
        "instruction": decoder.decode_instruction,
        "account": decoder.decode_account,
        "event": decoder.decode_event,
    }[args.command]
    result = decode(data)
    if result is None:
        print(f"no {args.command} matches the data", file=sys.stderr)
        return 1
    print(json.dumps(_render(result), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())