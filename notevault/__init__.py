"""
NoteVault - Encrypted Notes Vault

A small local vault for short text notes, encrypted at rest.

Key Features:
- AES-256-GCM authenticated encryption, fresh random nonce per note
- Password -> key with SHA-256 (no salt; see crypto.py for the caveat)
- Wrong password and tampering look identical (no password oracle)
- One JSON file, rewritten atomically on every change

Components:
- crypto.py: Key derivation and AES-GCM
- records.py: vault.json records and sealed tokens
- vault.py: Load/modify/save operations
- cli.py: Command-line interface (argparse)

Usage:
    python -m notevault new diary "met Alice today"
    python -m notevault list
    python -m notevault read diary
    python -m notevault delete diary
"""

from .errors import (
    NoteVaultError,
    AuthenticationFailure,
    WrongPasswordOrCorrupted,
    NotFound,
    TitleExists,
    MalformedRecord,
    CorruptVault,
    IOFailure,
)
from .vault import Vault

__version__ = "0.1.0"

__all__ = [
    "Vault",
    "NoteVaultError",
    "AuthenticationFailure",
    "WrongPasswordOrCorrupted",
    "NotFound",
    "TitleExists",
    "MalformedRecord",
    "CorruptVault",
    "IOFailure",
]
