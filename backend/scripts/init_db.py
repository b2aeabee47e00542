"""Provision the database tables and the staging directory.

Run: python scripts/init_db.py
"""

import asyncio
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from app.core.config import settings
from app.core.database import engine, init_models
from app.modules.transcoding import StagingArea
from app.modules.video.models import Video  # noqa: F401  registers the table


async def main() -> None:
    print("=" * 50)
    print("Provisioning Clipvault")
    print("=" * 50)
    print(f"  Database: {settings.DATABASE_URL}")
    print(f"  Assets:   {settings.ASSETS_ROOT}")
    print()

    staging = StagingArea()
    staging.ensure_root()
    print(f"✓ Staging directory ready at {staging.root.absolute()}")

    try:
        await init_models()
    finally:
        await engine.dispose()
    print("✓ Tables created")


if __name__ == "__main__":
    asyncio.run(main())
