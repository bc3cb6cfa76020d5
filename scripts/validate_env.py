#!/usr/bin/env python3
"""
Check that the storage environment is configured and reachable.

Verifies required environment variables, then connects to the object
store and confirms the configured bucket exists.

Usage:
    python scripts/validate_env.py

Requires:
    - .env file (or exported variables) with STORAGE_* settings

Exits with status 1 if anything is missing or the bucket can't be reached.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from resume_storage.api.dependencies import build_storage_service  # noqa: E402
from resume_storage.config.settings import Settings  # noqa: E402
from resume_storage.core.storage import StorageProvisioningError  # noqa: E402


def check_variables(settings: Settings) -> bool:
    """Print each required variable's status. Returns True if all are set."""
    print("\nChecking storage configuration...")

    missing = settings.validate_required_fields()
    for name in missing:
        print(f"  missing {name}")

    if not missing:
        print("  all required variables found")

    return not missing


async def check_bucket(settings: Settings) -> bool:
    """Connect to the store and confirm the bucket exists."""
    if settings.storage_mock_mode:
        print("\nMock mode enabled, skipping bucket check")
        return True

    service = build_storage_service(settings)
    try:
        await service.check_bucket()
    except StorageProvisioningError as e:
        cause = e.__cause__ or e
        print(f"\nStorage connection failed: {cause}")
        return False

    print(f"\nStorage connection successful, bucket {settings.storage_bucket} exists")
    return True


def main() -> int:
    settings = Settings()

    ok = check_variables(settings)
    if ok:
        ok = asyncio.run(check_bucket(settings))

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
