"""
NoteVault - Cryptography Module

All cryptographic operations for the note vault live here:
- Key derivation: password -> 32-byte key
- Authenticated encryption: AES-256-GCM with a fresh random nonce

Security Architecture:
    1. Password -> SHA-256 -> Key (32 bytes)
    2. Note content -> AES-256-GCM(key, random 12-byte nonce) -> ciphertext + tag
    3. Nonce is stored next to the ciphertext; the tag detects any tampering

Known limitation:
    The key is a single unsalted SHA-256 of the password. That keeps the key
    deterministic (no salt needs to be stored, and vault.json files written
    by earlier versions still open) but it is fast to brute force and open to
    precomputed dictionaries. Pick a long password.
"""

import os
import logging
from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import AuthenticationFailure

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

KEY_SIZE = 32            # 256-bit key
NONCE_SIZE = 12          # 96-bit nonce for AES-GCM
TAG_SIZE = 16            # 128-bit authentication tag


# =============================================================================
# Key Derivation
# =============================================================================

def derive_key(password: str) -> bytes:
    """
    Derive the note key from a password using SHA-256.

    The raw digest is the AES-256 key. Same password, same key, every time.
    Any string works, including the empty one and strings carrying lone
    surrogates (undecodable bytes from argv or the terminal).

    Args:
        password: Password typed at this invocation

    Returns:
        32-byte key
    """
    digest = hashes.Hash(hashes.SHA256())
    digest.update(password.encode('utf-8', 'surrogatepass'))
    return digest.finalize()


# =============================================================================
# Encryption (AES-256-GCM)
# =============================================================================

def encrypt(key: bytes, plaintext: bytes) -> Tuple[bytes, bytes]:
    """
    Encrypt data with AES-256-GCM (Authenticated Encryption).

    Args:
        key: 32-byte key from derive_key()
        plaintext: Note content

    Returns:
        (nonce, ciphertext) tuple
        - nonce: 12 random bytes (must be stored with ciphertext)
        - ciphertext: encrypted data + 16-byte tag
    """
    # Generate random nonce (NEVER reuse with same key!)
    nonce = os.urandom(NONCE_SIZE)

    aesgcm = AESGCM(key)
    ciphertext = aesgcm.encrypt(nonce, plaintext, None)

    return nonce, ciphertext


def decrypt(key: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
    """
    Decrypt AES-256-GCM ciphertext.

    Args:
        key: Same 32-byte key used for encryption
        nonce: Same 12-byte nonce used for encryption
        ciphertext: Encrypted data (includes tag)

    Returns:
        Plaintext bytes

    Raises:
        AuthenticationFailure: Wrong key, wrong nonce, or tampered ciphertext
    """
    if len(key) != KEY_SIZE or len(nonce) != NONCE_SIZE:
        raise AuthenticationFailure()

    aesgcm = AESGCM(key)
    try:
        return aesgcm.decrypt(nonce, ciphertext, None)
    except InvalidTag:
        logger.debug("GCM tag verification failed")
        raise AuthenticationFailure() from None
