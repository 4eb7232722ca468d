"""
NoteVault - Record Codec

Converts notes between their in-memory form and text.

On disk (vault.json) every note is one JSON object:

    {"title": "diary", "content": "<base64 ciphertext+tag>", "nonce": "<base64 nonce>"}

and the file is a JSON array of those objects. The single-string "sealed
token" form, base64(nonce || ciphertext), is used to move one note between
vaults. Because the nonce is always NONCE_SIZE bytes, the split is trivial.

Everything here is pure: no files, no keys.
"""

import base64
import json
from typing import Any, Dict, List, Tuple

from .crypto import NONCE_SIZE, TAG_SIZE
from .errors import CorruptVault, MalformedRecord


# =============================================================================
# Base64 helpers
# =============================================================================

def _b64e(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')


def _b64d(text: str, what: str) -> bytes:
    """Strict standard base64 decode; MalformedRecord on bad input."""
    try:
        return base64.b64decode(text, validate=True)
    except ValueError as e:  # binascii.Error, or non-ASCII characters
        raise MalformedRecord(f"Invalid base64 in {what}") from e


# =============================================================================
# Sealed token: base64(nonce || ciphertext)
# =============================================================================

def encode(nonce: bytes, ciphertext: bytes) -> str:
    """Pack nonce and ciphertext into one text-safe string."""
    if len(nonce) != NONCE_SIZE:
        raise ValueError(f"Nonce must be {NONCE_SIZE} bytes")
    return _b64e(nonce + ciphertext)


def decode(text: str) -> Tuple[bytes, bytes]:
    """
    Split a sealed token back into (nonce, ciphertext).

    Raises:
        MalformedRecord: Not base64, or too short to hold nonce + tag
    """
    raw = _b64d(text.strip(), "sealed token")
    if len(raw) < NONCE_SIZE + TAG_SIZE:
        raise MalformedRecord("Sealed token is too short")
    return raw[:NONCE_SIZE], raw[NONCE_SIZE:]


# =============================================================================
# Vault file records
# =============================================================================

def encode_record(title: str, nonce: bytes, ciphertext: bytes) -> Dict[str, str]:
    """Build the JSON object stored in vault.json for one note."""
    if len(nonce) != NONCE_SIZE:
        raise ValueError(f"Nonce must be {NONCE_SIZE} bytes")
    return {
        "title": title,
        "content": _b64e(ciphertext),
        "nonce": _b64e(nonce),
    }


def decode_record(raw: Any) -> Dict[str, Any]:
    """
    Validate and decode one stored record.

    Returns:
        Dict with title (str), nonce (bytes), ciphertext (bytes)

    Raises:
        MalformedRecord: Anything about the record is off
    """
    if not isinstance(raw, dict):
        raise MalformedRecord("Record is not a JSON object")

    for field in ("title", "content", "nonce"):
        if not isinstance(raw.get(field), str):
            raise MalformedRecord(f"Record field '{field}' is missing or not a string")

    title = raw["title"]
    nonce = _b64d(raw["nonce"], f"nonce of '{title}'")
    ciphertext = _b64d(raw["content"], f"content of '{title}'")

    if len(nonce) != NONCE_SIZE:
        raise MalformedRecord(f"Nonce of '{title}' is {len(nonce)} bytes, expected {NONCE_SIZE}")
    if len(ciphertext) < TAG_SIZE:
        raise MalformedRecord(f"Content of '{title}' is shorter than the authentication tag")

    return {"title": title, "nonce": nonce, "ciphertext": ciphertext}


# =============================================================================
# Whole vault file
# =============================================================================

def dump_vault(records: List[Dict[str, Any]]) -> str:
    """Serialize stored records (as produced by encode_record) to vault.json text."""
    return json.dumps(records, indent=2, ensure_ascii=False)


def load_vault(text: str) -> List[Any]:
    """
    Parse vault.json text into a list of raw (undecoded) records.

    Records are returned raw so one bad entry can be skipped without losing
    the rest; run each through decode_record().

    Raises:
        CorruptVault: Text is not a JSON array
    """
    if not text.strip():
        return []
    try:
        data = json.loads(text)
    except ValueError as e:
        raise CorruptVault(f"Vault file is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise CorruptVault("Vault file does not contain a list of notes")
    return data
