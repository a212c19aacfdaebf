"""
Database Migration Runner

Applies the SQL migrations in this directory in file-name order.
"""
import asyncio
import sys

import asyncpg

from ..config import Config


async def run_migrations() -> bool:
    """Run all SQL migrations in order; returns False if any failed"""
    sql_files = sorted(Config.MIGRATIONS_DIR.glob("*.sql"))
    ok = True

    print("Connecting to database...")
    conn = await asyncpg.connect(Config.get_postgres_dsn())
    print("Connected successfully!")

    try:
        for sql_file in sql_files:
            print(f"\nRunning migration: {sql_file.name}")
            sql = sql_file.read_text()

            try:
                await conn.execute(sql)
                print(f"  ✓ {sql_file.name} completed")
            except asyncpg.PostgresError as e:
                print(f"  ✗ Error in {sql_file.name}: {e}")
                ok = False
    finally:
        await conn.close()

    print("\nMigrations complete!" if ok else "\nMigrations finished with errors")
    return ok


def main():
    try:
        ok = asyncio.run(run_migrations())
    except (OSError, asyncpg.PostgresError) as e:
        print(f"Connection failed: {e}")
        sys.exit(1)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
