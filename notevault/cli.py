"""
NoteVault - Command Line Interface

Thin layer over Vault: parse arguments, prompt for the password without
echo, call one operation, print the outcome.

    notevault new <title> <content> [--force]
    notevault list
    notevault read <title> [--copy]
    notevault delete <title>
    notevault export <title>
    notevault import <title> <token> [--force]

Exit codes: 0 success, 1 vault error, 130 interrupted.
"""

import sys
import getpass
import logging
import argparse
from typing import List, Optional

import pyperclip

from .errors import NoteVaultError
from .vault import Vault, default_vault_path


def prompt_password() -> str:
    """Read the password from the terminal without echoing it."""
    return getpass.getpass("Enter password: ")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notevault",
        description="Manage your encrypted notes",
    )
    parser.add_argument(
        "--vault", default=None,
        help="Vault file (default: $NOTEVAULT_PATH or ./vault.json)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("new", help="Add a new encrypted note")
    p.add_argument("title")
    p.add_argument("content")
    p.add_argument("--force", action="store_true", help="Overwrite a note with the same title")

    sub.add_parser("list", help="List decryptable note titles")

    p = sub.add_parser("read", help="Read a note by its title")
    p.add_argument("title")
    p.add_argument("--copy", action="store_true", help="Copy to clipboard instead of printing")

    p = sub.add_parser("delete", help="Delete a note (if it can be decrypted)")
    p.add_argument("title")

    p = sub.add_parser("export", help="Print a note as a sealed token")
    p.add_argument("title")

    p = sub.add_parser("import", help="Store a sealed token as a note")
    p.add_argument("title")
    p.add_argument("token")
    p.add_argument("--force", action="store_true", help="Overwrite a note with the same title")

    return parser


def cmd_new(vault: Vault, args, password: str) -> None:
    vault.create(args.title, args.content, password, overwrite=args.force)
    print("✓ Note added.")


def cmd_list(vault: Vault, args, password: str) -> None:
    titles = vault.list_notes(password)
    if not titles:
        print("No decryptable notes.")
        return
    print("Decryptable notes:")
    for title in titles:
        print(f"  - {title}")


def cmd_read(vault: Vault, args, password: str) -> None:
    content = vault.read(args.title, password)
    if args.copy:
        pyperclip.copy(content)
        print(f"✓ Note '{args.title}' copied to clipboard!")
    else:
        print(content)


def cmd_delete(vault: Vault, args, password: str) -> None:
    vault.delete(args.title, password)
    print(f"✓ Note '{args.title}' deleted.")


def cmd_export(vault: Vault, args, password: str) -> None:
    print(vault.export_note(args.title, password))


def cmd_import(vault: Vault, args, password: str) -> None:
    vault.import_note(args.title, args.token, password, overwrite=args.force)
    print(f"✓ Note '{args.title}' imported.")


COMMANDS = {
    "new": cmd_new,
    "list": cmd_list,
    "read": cmd_read,
    "delete": cmd_delete,
    "export": cmd_export,
    "import": cmd_import,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    vault = Vault(args.vault or default_vault_path())
    try:
        password = prompt_password()
        COMMANDS[args.command](vault, args, password)
    except NoteVaultError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except pyperclip.PyperclipException as e:
        print(f"ERROR: clipboard unavailable ({e})", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nExiting...", file=sys.stderr)
        return 130
    except EOFError:
        print("ERROR: no password given (stdin closed)", file=sys.stderr)
        return 1
    return 0
