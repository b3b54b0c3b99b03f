#!/usr/bin/env python3
"""
Print a bcrypt hash for seeding a user's password_hash column.

Usage:
    python scripts/hash_password.py 'my-password'
    python scripts/hash_password.py            # prompts
"""

import argparse
import getpass
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from auth.passwords import BCRYPT_ROUNDS, hash_password


def main() -> int:
    parser = argparse.ArgumentParser(description="Hash a password with bcrypt")
    parser.add_argument("password", nargs="?", help="Password to hash (prompted when omitted)")
    parser.add_argument("--rounds", type=int, default=BCRYPT_ROUNDS, help="bcrypt cost factor")
    args = parser.parse_args()

    password = args.password if args.password is not None else getpass.getpass("Password: ")

    try:
        print(hash_password(password, rounds=args.rounds))
    except ValueError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
