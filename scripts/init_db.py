#!/usr/bin/env python3
"""Database initialization script."""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from bookstore.database import Base, drop_db, init_db


async def main():
    """Create (or recreate) the catalog tables."""
    import argparse

    parser = argparse.ArgumentParser(description="Catalog database management")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all catalog tables")
    args = parser.parse_args()

    if args.reset:
        print("Dropping catalog tables...")
        await drop_db()
        print("Catalog tables dropped.")

    print("Creating catalog tables...")
    await init_db()
    print("Catalog database ready.")
    print("\nTables:")
    for table in Base.metadata.sorted_tables:
        print(f"  - {table.name}")


if __name__ == "__main__":
    asyncio.run(main())
