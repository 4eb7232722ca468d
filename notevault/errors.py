"""
NoteVault - Error Types

Every failure the core can report is one of these. The CLI catches
NoteVaultError and turns it into a message and a non-zero exit code.
"""


class NoteVaultError(Exception):
    """Base class for all vault failures."""


class AuthenticationFailure(NoteVaultError):
    """
    AES-GCM tag did not verify.

    Means "wrong password OR tampered/corrupted record". The two cases are
    deliberately indistinguishable so the vault is not a password oracle.
    """

    def __init__(self, message: str = "Wrong password or corrupted note"):
        super().__init__(message)


WrongPasswordOrCorrupted = AuthenticationFailure


class NotFound(NoteVaultError):
    """No note with the requested title."""

    def __init__(self, title: str):
        super().__init__(f"Note '{title}' not found")
        self.title = title


class TitleExists(NoteVaultError):
    """A note with this title is already stored."""

    def __init__(self, title: str):
        super().__init__(f"Note '{title}' already exists (use --force to overwrite)")
        self.title = title


class MalformedRecord(NoteVaultError):
    """A stored record (or sealed token) cannot be decoded."""


class CorruptVault(MalformedRecord):
    """The vault file itself is not a readable JSON array."""


class IOFailure(NoteVaultError):
    """Reading or writing the vault file failed."""
