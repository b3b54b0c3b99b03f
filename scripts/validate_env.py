#!/usr/bin/env python3
"""
Validate the environment configuration.

Loads settings the same way the API does (.env plus process environment) and
prints every problem found. Exits with status 1 when the configuration is not
usable.

Usage:
    python scripts/validate_env.py
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import load_settings
from domain.errors import ConfigurationError


def main() -> int:
    print("=" * 60)
    print("VALIDATING ENVIRONMENT")
    print("=" * 60)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"[ERROR] {e}")
        return 1

    print(f"Environment:   {settings.env}")
    print(f"Database type: {settings.database_type}")
    print(f"SMS provider:  {settings.sms_provider}")
    print(f"Email provider: {settings.email_provider}")
    print()

    errors = settings.validation_errors()
    if errors:
        for problem in errors:
            print(f"[ERROR] {problem}")
        print()
        print(f"Configuration invalid ({len(errors)} problem(s))")
        return 1

    print("[SUCCESS] Configuration is valid")
    return 0


if __name__ == "__main__":
    sys.exit(main())
