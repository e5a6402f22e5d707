"""credvault command line.

    credvault encrypt              # prompt for a password and key, print the config value
    credvault generate-key         # print a new random ENCRYPTION_KEY
    credvault check config.json    # verify every password decrypts
    credvault rotate config.json   # re-encrypt under a new key
"""
import sys
import getpass
import logging
import argparse
from pathlib import Path
from typing import Optional

import orjson

from .exceptions import CredVaultError
from .models import select_environment
from .vault import (
    VaultConfig,
    encrypt_secret,
    generate_encryption_key,
    is_encrypted,
    loads_config,
    mark,
    resolve_secrets,
    rotate_passphrase,
)
from .vault.config import ENCRYPTION_KEY_VAR
from .vault.resolver import iter_password_fields

logger = logging.getLogger("credvault.cli")


class CommandError(CredVaultError):
    """Raised on invalid operator input."""


def _prompt_secret(prompt: str, confirm: bool = False) -> str:
    value = getpass.getpass(prompt)
    if confirm and value and getpass.getpass("Confirm: ") != value:
        raise CommandError("Values do not match")
    return value


def cmd_encrypt(args: argparse.Namespace) -> int:
    if args.password_stdin:
        password = sys.stdin.readline().rstrip("\r\n")
    else:
        password = _prompt_secret("Enter password to encrypt: ")
    key = _prompt_secret(
        f"Enter encryption key (store in {ENCRYPTION_KEY_VAR} env var): ",
        confirm=True,
    )
    if not password or not key:
        raise CommandError("Both password and encryption key are required")

    value = mark(encrypt_secret(password, key))
    print("Add this to config.json:")
    print(f'"password": "{value}"')
    print(f"\nSet {ENCRYPTION_KEY_VAR} to the same key locally and in CI secrets.")
    return 0


def cmd_generate_key(args: argparse.Namespace) -> int:
    print(generate_encryption_key())
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    settings = VaultConfig.from_env()
    source = args.config or settings.config_path
    with open(source, "rb") as fp:
        raw = fp.read()
    document = loads_config(raw)
    encrypted = {
        env for env, credentials in iter_password_fields(document)
        if is_encrypted(credentials["password"])
    }
    resolve_secrets(document, settings=settings)
    if args.env:
        names = [args.env.strip().upper()]
    else:
        # top-level keys that are not records (e.g. "version") are not environments
        names = sorted(k for k, v in document.items() if isinstance(v, dict))
    for name in names:
        record = select_environment(document, name)
        state = "decrypted" if name in encrypted else "plaintext"
        print(f"{name}: {record.base_url} user={record.credentials.username} password={state}")
    return 0


def cmd_rotate(args: argparse.Namespace) -> int:
    with open(args.config, "rb") as fp:
        document = loads_config(fp.read())
    old_key = _prompt_secret("Current encryption key: ")
    new_key = _prompt_secret("New encryption key: ", confirm=True)
    if not old_key or not new_key:
        raise CommandError("Both current and new encryption keys are required")
    stats = rotate_passphrase(document, old_key, new_key)
    output = orjson.dumps(document, option=orjson.OPT_INDENT_2) + b"\n"
    if args.output:
        Path(args.output).write_bytes(output)
    else:
        sys.stdout.write(output.decode("utf-8"))
    print(
        f"Rotated {stats['rotated']} password(s), "
        f"skipped {stats['skipped']} plaintext",
        file=sys.stderr,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="credvault",
        description="Encrypted passwords for end-to-end test configuration",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("encrypt", help="Encrypt a password for config.json")
    p.add_argument(
        "--password-stdin", action="store_true",
        help="Read the password from the first line of stdin",
    )
    p.set_defaults(func=cmd_encrypt)

    p = sub.add_parser("generate-key", help="Print a new random encryption key")
    p.set_defaults(func=cmd_generate_key)

    p = sub.add_parser("check", help="Verify that every password in a config decrypts")
    p.add_argument("config", nargs="?", help="Path to config.json (default: CREDVAULT_CONFIG)")
    p.add_argument("--env", help="Only check this environment")
    p.set_defaults(func=cmd_check)

    p = sub.add_parser("rotate", help="Re-encrypt passwords under a new key")
    p.add_argument("config", help="Path to config.json")
    p.add_argument("-o", "--output", help="Write the result here instead of stdout")
    p.set_defaults(func=cmd_rotate)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (CredVaultError, OSError) as err:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {err}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
