"""
NoteVault - Attack Demonstration

Run: python attack_demo.py

What it shows (and why attacks fail):
1) Wrong password cannot read a note.
2) Ciphertext tampering is detected by AES-GCM.
3) Swapping nonces between notes is detected by AES-GCM.
4) Deleting a note requires the note's password.
5) A corrupted record doesn't take the rest of the vault down.
"""

import os
import json
import shutil
import tempfile

from notevault import records
from notevault.vault import Vault
from notevault.errors import NoteVaultError


LINE = "=" * 70


def section(title: str):
    print(f"\n{LINE}\n{title}\n{LINE}")


def attempt(description: str, action) -> bool:
    """Run an attack; return True if it was stopped."""
    try:
        action()
    except NoteVaultError as e:
        print(f"Expected failure: {description} ({type(e).__name__}: {e})")
        return True
    print(f"Unexpected: {description} succeeded")
    return False


def _rewrite(path, change):
    with open(path, encoding="utf-8") as f:
        stored = json.load(f)
    change(stored)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(stored, f, indent=2)


def main(workdir=None) -> bool:
    own_dir = workdir is None
    workdir = workdir or tempfile.mkdtemp(prefix="notevault-demo-")
    path = os.path.join(workdir, "vault.json")
    password = "CorrectHorseBatteryStaple!"
    stopped = []

    try:
        vault = Vault(path)
        vault.create("diary", "met Alice today", password)
        vault.create("pin", "1234", password)

        # 1) Wrong password
        section("Attack 1: Wrong password")
        stopped.append(attempt("wrong password reads the note",
                               lambda: vault.read("diary", "hunter3")))

        # 2) Ciphertext tampering
        section("Attack 2: Ciphertext tampering (AES-GCM)")

        def flip_bit(stored):
            rec = records.decode_record(stored[0])
            ct = bytearray(rec["ciphertext"])
            ct[0] ^= 1  # flip one bit
            stored[0] = records.encode_record(rec["title"], rec["nonce"], bytes(ct))

        _rewrite(path, flip_bit)
        stopped.append(attempt("tampered ciphertext decrypts",
                               lambda: vault.read("diary", password)))

        # 3) Nonce swap
        section("Attack 3: Nonce swap between notes")
        vault.create("diary2", "second diary", password)

        def swap_nonce(stored):
            stored[1]["nonce"], stored[2]["nonce"] = stored[2]["nonce"], stored[1]["nonce"]

        _rewrite(path, swap_nonce)
        stopped.append(attempt("note with a foreign nonce decrypts",
                               lambda: vault.read("pin", password)))

        # 4) Delete without the password
        section("Attack 4: Deleting someone else's note")
        vault.create("theirs", "not yours", "their password")
        stopped.append(attempt("delete with the wrong password",
                               lambda: vault.delete("theirs", password)))
        print(f"Note still readable by its owner: {vault.read('theirs', 'their password')!r}")

        # 5) Corrupted record
        section("Attack 5: Corrupted record in the vault file")
        _rewrite(path, lambda stored: stored.append({"title": "junk", "content": "???"}))
        titles = vault.list_notes("their password")
        print(f"Listing still works, corrupted record skipped: {titles}")
        stopped.append(titles == ["theirs"])
    finally:
        if own_dir:
            shutil.rmtree(workdir, ignore_errors=True)

    ok = all(stopped)
    print("\nDemo complete. " + ("All showcased attacks failed as expected." if ok
                                 else "SOME ATTACKS SUCCEEDED!"))
    return ok


if __name__ == "__main__":
    main()
