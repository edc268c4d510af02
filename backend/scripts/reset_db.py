#!/usr/bin/env python3
"""Delete all users, bookings, availability, subscriptions, payments, messages and workout plans.
Run from backend: python scripts/reset_db.py
"""
import sys
from pathlib import Path

# Ensure backend is on path when run as script
backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from gymapp.db.session import SessionLocal
from gymapp.services.admin_service import reset_db


def main():
    db = SessionLocal()
    try:
        deleted = reset_db(db)
        print("Database cleared. Rows deleted:")
        for table, count in deleted.items():
            print(f"  {table}: {count}")
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
