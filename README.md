# idldecoder

Decode the raw bytes of Anchor program instructions, accounts and events.
The decoding is driven entirely by the program's IDL JSON file.

Every instruction, account and event in an Anchor IDL carries an 8-byte
discriminator. `idldecoder` matches that prefix. It then decodes the rest of
the data as Borsh, using the argument and type definitions in the IDL.

No third-party dependencies are needed.

## Library use

```python
from idldecoder.idl import Idl
from idldecoder.decoder import Decoder

idl = Idl.load("idl.json")          # also Idl.from_json(text), Idl.from_dict(obj)
decoder = Decoder(idl)

instruction = decoder.decode_instruction(raw_instruction_bytes)
account = decoder.decode_account(raw_account_bytes)
event = decoder.decode_event(raw_event_bytes)
```

### Loading the IDL

Loading an IDL raises `IdlError` (a `ValueError`) in these cases:

- the file cannot be read;
- the JSON is invalid;
- the `instructions` array is missing;
- an instruction's discriminator is not 8 bytes;
- the `address` field is missing or is not valid base58 for a 32-byte key;
- an account or event names a type that is not defined under `types`.

`Idl` holds:

- `address`, a `Pubkey`;
- `instructions`, a tuple of `InstructionDef`;
- `accounts` and `events`, tuples of `DiscriminatedDef`;
- `types`, a `TypeRegistry`.

### Decoding

Each decode method returns `None` when:

- the data is shorter than 8 bytes;
- no discriminator matches; or
- the payload does not decode.

The results are frozen dataclasses:

- `DecodedInstruction` has `name`, `args` and `event`. `name` is the CamelCase instruction name, e.g. `create_order` becomes `CreateOrder`. `args` is a dict of argument values in IDL order.
- `DecodedAccount` and `DecodedEvent` have `name` and `data`.

`decode_instruction` also recognises the self-CPI event instruction
(`emit_cpi`, discriminator `[228, 69, 165, 46, 81, 203, 154, 29]`). For that
instruction the result's `name` is `EmitCpi`, and `event` holds the
`DecodedEvent` decoded from the payload.

Decoded values take these forms:

| IDL type | Python value |
| --- | --- |
| `u8`, `u16`, `u32`, `u64`, `i64` | `int` |
| `bool` | `bool` |
| `pubkey` | `Pubkey` |
| `string` | `str` |
| `bytes` | `bytes` |
| `vec`, fixed `array` | `list` |
| defined struct | `dict` of its fields |
| defined enum | the variant name, as a `str` |

A type the decoder does not recognise decodes to `None` and consumes no
bytes. Examples are `i8` or `u128`.

### Instruction accounts

Each `InstructionDef` carries an `AccountsLayout`. It gives the names of the
accounts the instruction expects, with their positions:

```python
swap = idl.instruction("swap")       # KeyError if there is no such instruction
swap.accounts.account_name(0)        # name at position 0, or None
swap.accounts.account_index("pool")  # position of a named account, or None
swap.accounts.all_accounts()         # ((name, index), ...) in IDL order
swap.accounts.map_accounts(keys)     # {name: key} for a list of keys
```

### Custom types

`idldecoder.types.TypeRegistry` holds the IDL's struct and enum definitions.
It has these methods:

- `decode(type_spec, data)` decodes any type spec. Every byte must be used.
- `decode_named(name, data)` decodes a custom type by name.
- `type_name(type_spec)` describes a type, e.g. `Vec<u8>`, `[u64; 4]` or `Pubkey`.

On malformed data these methods raise `DecodeError`. Data is malformed when,
for example:

- it ends early or leaves bytes over;
- a bool byte is not 0 or 1;
- a string is not valid UTF-8;
- an enum variant index is out of range.

### Public keys and base58

```python
from idldecoder.pubkey import Pubkey, b58encode, b58decode

key = Pubkey.from_base58("11111111111111111111111111111111")
key.to_base58()
bytes(key)                          # the 32 raw bytes
```

`Pubkey` raises `ValueError` unless it is given exactly 32 bytes.
`b58decode` raises `ValueError` on a character outside the base58 alphabet.

`idldecoder.naming.to_camel_case` converts a snake_case name to CamelCase.

## Command line

```
idldecoder IDL instruction DATA [--encoding hex|base58|base64]
idldecoder IDL account DATA [--encoding hex|base58|base64]
idldecoder IDL event DATA [--encoding hex|base58|base64]
idldecoder IDL describe
```

`DATA` is hex by default.

The decoded result is printed to standard output as JSON. In that JSON,
public keys are given in base58 and byte strings in hex.

`describe` lists the following, one per line:

- the program address;
- each instruction, with its argument types;
- each account;
- each event.

The exit status is:

- `0` on success;
- `1` when nothing matches the data;
- `2` when the IDL cannot be loaded or the data cannot be read in the chosen encoding.

## What it does not do

- It only decodes bytes you hand it. It does not fetch transactions or accounts from a network.
- It does not encode or serialise data.
- It does not generate code from the IDL.