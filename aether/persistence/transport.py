"""
Save Transport - Turns a save record into a copy-pasteable code and back.

Format: "<dynamicKey>&<base64>"
- dynamicKey is derived from the effect ids in the saved circle
- the JSON payload is XOR-ed with SALT + dynamicKey, then base64 encoded

This is obfuscation, not security. The byte layout is not a
compatibility promise; only the schema version is checked on import.
"""

from __future__ import annotations
import base64
import binascii
import json
from typing import Any

from ..catalog.cards import get_card

SALT = "aether_cycles_secret_salt_v1"
SEPARATOR = "&"


class SaveCodeError(ValueError):
    """Malformed save code, wrong version or missing required fields."""


def xor_cipher(text: str, key: str) -> str:
    """Symmetric XOR over code points; an empty key leaves text unchanged."""
    if not key:
        return text
    return "".join(
        chr(ord(ch) ^ ord(key[i % len(key)]))
        for i, ch in enumerate(text)
    )


def dynamic_key(record: dict[str, Any]) -> str:
    """Concatenated, lower-cased effect ids of the saved slots ("null" when empty)."""
    parts = []
    for saved in record.get("sl") or []:
        if saved is None:
            parts.append("null")
            continue
        card = get_card(saved.get("cid"))
        if card is None or card.effect_id is None:
            parts.append("unknown")
        else:
            parts.append(card.effect_id.value.lower().replace("_", ""))
    return "".join(parts)


def encode(record: dict[str, Any]) -> str:
    """Encode a save record (the aliased JSON dict) into a save code."""
    key = dynamic_key(record)
    payload = json.dumps(record, separators=(",", ":"))
    cipher = xor_cipher(payload, SALT + key)
    data = base64.b64encode(cipher.encode("utf-8")).decode("ascii")
    return f"{key}{SEPARATOR}{data}"


def decode(code: str) -> dict[str, Any]:
    """
    Decode a save code back into a save record.

    Raises SaveCodeError if the code cannot be split, base64-decoded,
    decrypted into JSON, or lacks the numeric v/cur/gh fields.
    """
    parts = code.strip().split(SEPARATOR)
    if len(parts) != 2:
        raise SaveCodeError("Invalid save code format")
    key, data = parts

    try:
        cipher = base64.b64decode(data, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise SaveCodeError(f"Save code is not valid base64: {e}") from e

    try:
        record = json.loads(xor_cipher(cipher, SALT + key))
    except json.JSONDecodeError as e:
        raise SaveCodeError("Save code does not decrypt to a save record") from e

    if not isinstance(record, dict):
        raise SaveCodeError("Save record must be an object")
    for name in ("v", "cur", "gh"):
        value = record.get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SaveCodeError(f"Save record is missing numeric field '{name}'")
    return record
