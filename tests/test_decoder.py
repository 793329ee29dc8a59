import struct

from idldecoder.decoder import (
    EMIT_CPI_INSTRUCTION_DISCRIMINATOR,
    DecodedAccount,
    DecodedEvent,
    Decoder,
)
from idldecoder.idl import Idl
from idldecoder.pubkey import Pubkey

ADDRESS_KEY = Pubkey(bytes(range(1, 33)))
CREATE_DISC = bytes([1, 2, 3, 4, 5, 6, 7, 8])
CLOSE_DISC = bytes([9] * 8)
ORDER_DISC = bytes(range(10, 18))
FILLED_DISC = bytes(range(20, 28))


def make_idl_dict():
    return {
        "address": ADDRESS_KEY.to_base58(),
        "instructions": [
            {
                "name": "create_order",
                "discriminator": list(CREATE_DISC),
                "accounts": [{"name": "owner"}, {"name": "order"}],
                "args": [
                    {"name": "amount", "type": "u64"},
                    {"name": "side", "type": {"defined": {"name": "Side"}}},
                ],
            },
            {"name": "close", "discriminator": list(CLOSE_DISC), "accounts": [], "args": []},
        ],
        "accounts": [{"name": "Order", "discriminator": list(ORDER_DISC)}],
        "events": [{"name": "OrderFilled", "discriminator": list(FILLED_DISC)}],
        "types": [
            {"name": "Side", "type": {"kind": "enum", "variants": [{"name": "Bid"}, {"name": "Ask"}]}},
            {
                "name": "Order",
                "type": {
                    "kind": "struct",
                    "fields": [{"name": "owner", "type": "pubkey"}, {"name": "amount", "type": "u64"}],
                },
            },
            {
                "name": "OrderFilled",
                "type": {
                    "kind": "struct",
                    "fields": [{"name": "price", "type": "u32"}, {"name": "filled", "type": "bool"}],
                },
            },
        ],
    }


def make_decoder(data=None):
    return Decoder(Idl.from_dict(data or make_idl_dict()))


def test_emit_cpi_discriminator_value():
    assert EMIT_CPI_INSTRUCTION_DISCRIMINATOR == bytes([228, 69, 165, 46, 81, 203, 154, 29])


def test_decode_instruction_with_args():
    data = CREATE_DISC + struct.pack("<Q", 500) + bytes([1])
    result = make_decoder().decode_instruction(data)
    assert result.name == "CreateOrder"
    assert result.args == {"amount": 500, "side": "Ask"}
    assert result.event is None


def test_decoded_instruction_maps_accounts():
    result = make_decoder().decode_instruction(CREATE_DISC + struct.pack("<Q", 1) + bytes([0]))
    keys = [Pubkey(bytes([7]) * 32), Pubkey(bytes([8]) * 32)]
    assert result.definition.accounts.map_accounts(keys) == {"owner": keys[0], "order": keys[1]}


def test_trailing_bytes_reject_instruction():
    data = CREATE_DISC + struct.pack("<Q", 500) + bytes([1, 0])
    assert make_decoder().decode_instruction(data) is None


def test_truncated_args_reject_instruction():
    assert make_decoder().decode_instruction(CREATE_DISC + bytes([1, 2])) is None


def test_short_data_returns_none():
    decoder = make_decoder()
    assert decoder.decode_instruction(CREATE_DISC[:7]) is None
    assert decoder.decode_account(ORDER_DISC[:3]) is None
    assert decoder.decode_event(b"") is None


def test_unknown_discriminator_returns_none():
    assert make_decoder().decode_instruction(bytes(8) + bytes(9)) is None


def test_unit_instruction_ignores_payload():
    decoder = make_decoder()
    plain = decoder.decode_instruction(CLOSE_DISC)
    padded = decoder.decode_instruction(CLOSE_DISC + b"extra")
    assert plain.args == {}
    assert plain == padded


def test_failed_match_falls_through_to_next_instruction():
    data = make_idl_dict()
    data["instructions"] = [
        {"name": "wide", "discriminator": list(CREATE_DISC), "args": [{"name": "value", "type": "u64"}]},
        {"name": "narrow", "discriminator": list(CREATE_DISC), "args": [{"name": "value", "type": "u8"}]},
    ]
    result = make_decoder(data).decode_instruction(CREATE_DISC + bytes([5]))
    assert result.definition.name == "narrow"
    assert result.args == {"value": 5}


def test_external_type_never_decodes():
    data = make_idl_dict()
    data["instructions"][1]["args"] = [{"name": "thing", "type": {"defined": {"name": "External"}}}]
    assert make_decoder(data).decode_instruction(CLOSE_DISC + bytes(4)) is None


def test_decode_account():
    owner = Pubkey(bytes([3]) * 32)
    data = ORDER_DISC + bytes(owner) + struct.pack("<Q", 7)
    assert make_decoder().decode_account(data) == DecodedAccount("Order", {"owner": owner, "amount": 7})


def test_decode_account_wrong_size():
    assert make_decoder().decode_account(ORDER_DISC + bytes(10)) is None


def test_decode_event():
    data = FILLED_DISC + struct.pack("<I", 42) + bytes([1])
    assert make_decoder().decode_event(data) == DecodedEvent("OrderFilled", {"price": 42, "filled": True})


def test_decode_event_invalid_bool():
    assert make_decoder().decode_event(FILLED_DISC + struct.pack("<I", 42) + bytes([2])) is None


def test_emit_cpi_wraps_event():
    data = EMIT_CPI_INSTRUCTION_DISCRIMINATOR + FILLED_DISC + struct.pack("<I", 9) + bytes([0])
    result = make_decoder().decode_instruction(data)
    assert result.name == "EmitCpi"
    assert result.event == DecodedEvent("OrderFilled", {"price": 9, "filled": False})


def test_emit_cpi_with_unknown_event():
    data = EMIT_CPI_INSTRUCTION_DISCRIMINATOR + bytes(8) + bytes(5)
    assert make_decoder().decode_instruction(data) is None