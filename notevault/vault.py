"""
NoteVault - Vault Module

This file handles:
- Loading and saving the vault file (one JSON array, rewritten whole)
- Creating, listing, reading and deleting notes
- Exporting/importing single notes as sealed tokens

Every operation follows the same discipline:
    1. Load a fresh snapshot of the whole file
    2. Derive the key from the password given to THIS call
    3. Apply one change in memory
    4. Atomically persist the snapshot (mutations only)

Nothing is cached between calls, and the key never outlives the call.
Failures never touch the file.
"""

import os
import logging
import tempfile
from typing import Any, Dict, List, Optional, Tuple

from . import crypto
from . import records as codec
from .errors import (
    AuthenticationFailure,
    CorruptVault,
    IOFailure,
    MalformedRecord,
    NotFound,
    TitleExists,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_VAULT_FILE = "vault.json"
VAULT_PATH_ENV = "NOTEVAULT_PATH"


def default_vault_path() -> str:
    """$NOTEVAULT_PATH if set, else vault.json in the working directory."""
    return os.environ.get(VAULT_PATH_ENV) or DEFAULT_VAULT_FILE


# =============================================================================
# VAULT CLASS
# =============================================================================

class Vault:
    """
    Password-protected note store backed by a single JSON file.

    Usage:
        vault = Vault("vault.json")
        vault.create("diary", "met Alice today", "hunter2")
        vault.list_notes("hunter2")          # ['diary']
        vault.read("diary", "hunter2")       # 'met Alice today'
        vault.delete("diary", "hunter2")

    Notes encrypted under different passwords can share one file; each
    password only ever sees its own notes.
    """

    def __init__(self, path: str):
        """
        Args:
            path: Path to the vault JSON file (need not exist yet)
        """
        self.path = path

    # =========================================================================
    # PUBLIC OPERATIONS
    # =========================================================================

    def create(self, title: str, content: str, password: str, overwrite: bool = False) -> None:
        """
        Encrypt and store a new note.

        Duplicate titles are rejected with TitleExists. With overwrite=True
        the existing note is replaced, but only if it opens under the same
        password (a note can't be clobbered by someone who can't read it).

        Raises:
            TitleExists: Title taken and overwrite not requested
            AuthenticationFailure: Overwrite requested with the wrong password
            IOFailure: Vault file could not be read or written
        """
        records = self._load()
        key = crypto.derive_key(password)
        nonce, ciphertext = crypto.encrypt(key, content.encode('utf-8'))
        self._put(records, title, nonce, ciphertext, key, overwrite)
        self._save(records)
        logger.info("Stored note '%s'", title)

    def list_notes(self, password: str) -> List[str]:
        """
        List titles of notes this password can decrypt, in file order.

        Notes under other passwords are silently left out. Malformed records
        are skipped with a warning instead of failing the whole listing.
        """
        records = self._load()
        key = crypto.derive_key(password)

        titles = []
        for index, raw in enumerate(records):
            try:
                record = codec.decode_record(raw)
            except MalformedRecord as e:
                logger.warning("Skipping malformed record #%d: %s", index, e)
                continue
            try:
                plaintext = crypto.decrypt(key, record['nonce'], record['ciphertext'])
            except AuthenticationFailure:
                continue
            try:
                self._to_text(plaintext, record['title'])
            except MalformedRecord as e:
                logger.warning("Skipping record #%d: %s", index, e)
                continue
            titles.append(record['title'])

        logger.debug("%d of %d notes readable", len(titles), len(records))
        return titles

    def read(self, title: str, password: str) -> str:
        """
        Decrypt one note.

        Raises:
            NotFound: No note with this title
            AuthenticationFailure: Wrong password or corrupted note
            MalformedRecord: Stored record can't be decoded
        """
        records = self._load()
        key = crypto.derive_key(password)
        _, plaintext = self._open_first(self._find(records, title), title, key)
        return plaintext

    def delete(self, title: str, password: str) -> None:
        """
        Delete a note, only after proving the password opens it.

        If an old vault holds several notes with this title, the ones this
        password opens are removed and the rest are kept.

        Raises:
            NotFound: No note with this title
            AuthenticationFailure: Password doesn't open the note
            IOFailure: Vault file could not be written
        """
        records = self._load()
        key = crypto.derive_key(password)
        matches = self._find(records, title)
        if not matches:
            raise NotFound(title)

        doomed = []
        for index, record in matches:
            try:
                crypto.decrypt(key, record['nonce'], record['ciphertext'])
            except AuthenticationFailure:
                continue
            doomed.append(index)

        if not doomed:
            raise AuthenticationFailure()

        for index in reversed(doomed):
            del records[index]
        self._save(records)
        logger.info("Deleted note '%s'", title)

    def export_note(self, title: str, password: str) -> str:
        """
        Return a note as a sealed token, base64(nonce || ciphertext).

        The token stays encrypted; it can be imported into another vault
        and opened there with the same password.
        """
        records = self._load()
        key = crypto.derive_key(password)
        record, _ = self._open_first(self._find(records, title), title, key)
        return codec.encode(record['nonce'], record['ciphertext'])

    def import_note(self, title: str, token: str, password: str, overwrite: bool = False) -> None:
        """
        Store a sealed token under `title`.

        The token must decrypt under `password` before it is accepted.

        Raises:
            MalformedRecord: Token isn't a valid sealed token
            AuthenticationFailure: Token doesn't open with this password
            TitleExists: Title taken and overwrite not requested
        """
        nonce, ciphertext = codec.decode(token)
        records = self._load()
        key = crypto.derive_key(password)
        self._to_text(crypto.decrypt(key, nonce, ciphertext), title)
        self._put(records, title, nonce, ciphertext, key, overwrite)
        self._save(records)
        logger.info("Imported note '%s'", title)

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    def _find(self, records: List[Any], title: str) -> List[Tuple[int, Dict[str, Any]]]:
        """
        Decoded records carrying `title`, with their positions.

        Undecodable copies are skipped as long as another copy decodes.

        Raises:
            MalformedRecord: Records with this title exist but none decode
        """
        matches = []
        broken = None
        for index, raw in enumerate(records):
            if not (isinstance(raw, dict) and raw.get('title') == title):
                continue
            try:
                matches.append((index, codec.decode_record(raw)))
            except MalformedRecord as e:
                logger.warning("Skipping malformed record #%d: %s", index, e)
                broken = e
        if not matches and broken is not None:
            raise broken
        return matches

    def _open_first(self, matches, title: str, key: bytes) -> Tuple[Dict[str, Any], str]:
        """First match that decrypts under `key`, with its plaintext."""
        if not matches:
            raise NotFound(title)
        for _, record in matches:
            try:
                plaintext = crypto.decrypt(key, record['nonce'], record['ciphertext'])
            except AuthenticationFailure:
                continue
            return record, self._to_text(plaintext, title)
        raise AuthenticationFailure()

    @staticmethod
    def _to_text(plaintext: bytes, title: str) -> str:
        try:
            return plaintext.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedRecord(f"Note '{title}' is not valid UTF-8 text") from e

    def _put(
        self,
        records: List[Any],
        title: str,
        nonce: bytes,
        ciphertext: bytes,
        key: bytes,
        overwrite: bool
    ) -> None:
        """Insert a record, applying the duplicate-title policy."""
        new_record = codec.encode_record(title, nonce, ciphertext)
        matches = self._find(records, title)

        if not matches:
            records.append(new_record)
            return
        if not overwrite:
            raise TitleExists(title)

        # Every existing copy must open under this password
        for _, record in matches:
            crypto.decrypt(key, record['nonce'], record['ciphertext'])

        first = matches[0][0]
        for index, _ in reversed(matches[1:]):
            del records[index]
        records[first] = new_record

    def _load(self) -> List[Any]:
        """
        Read the vault file. Missing file = empty vault.

        Raises:
            IOFailure: File exists but can't be read
            CorruptVault: File isn't a JSON array
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                text = f.read()
        except FileNotFoundError:
            logger.debug("No vault at %s, starting empty", self.path)
            return []
        except UnicodeDecodeError as e:
            raise CorruptVault(f"Vault file {self.path} is not UTF-8 text") from e
        except OSError as e:
            raise IOFailure(f"Cannot read vault {self.path}: {e}") from e
        return codec.load_vault(text)

    def _save(self, records: List[Any]) -> None:
        """
        Atomically replace the vault file.

        Writes a temp file in the same directory, fsyncs it, then
        os.replace()s it over the vault. On failure the old file is intact.

        Raises:
            IOFailure: Anything went wrong writing
        """
        data = codec.dump_vault(records)
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path: Optional[str] = None
        try:
            os.makedirs(directory, exist_ok=True)
            # mkstemp creates the file with 0600 permissions
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".vault-", suffix=".tmp")
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            self._discard(tmp_path)
            raise IOFailure(f"Cannot write vault {self.path}: {e}") from e
        except Exception:
            self._discard(tmp_path)
            raise
        logger.debug("Saved %d records to %s", len(records), self.path)

    @staticmethod
    def _discard(tmp_path: Optional[str]) -> None:
        if tmp_path and os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError:
                logger.warning("Could not remove temp file %s", tmp_path)
