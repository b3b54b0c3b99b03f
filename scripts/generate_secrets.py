#!/usr/bin/env python3
"""
Generate fresh JWT secrets for .env.

Usage:
    python scripts/generate_secrets.py >> .env
"""

import secrets


def generate_secret(num_bytes: int = 48) -> str:
    return secrets.token_urlsafe(num_bytes)


if __name__ == "__main__":
    print(f"JWT_SECRET={generate_secret()}")
    print(f"JWT_REFRESH_SECRET={generate_secret()}")
