#!/usr/bin/env python3
"""
Quick checks so the backend can start. Run from backend/:
  python scripts/check_backend.py
"""
import os
import sys
from pathlib import Path

# Run from backend/
backend_dir = Path(__file__).resolve().parent.parent
os.chdir(backend_dir)
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def main():
    errors = []

    # 1) .env
    env_file = backend_dir / ".env"
    if not env_file.exists():
        errors.append("backend/.env missing. Set DATABASE_URL and JWT_SECRET there.")
    else:
        print("OK  .env exists")

    # 2) JWT secret
    from gymapp.config import settings
    if settings.jwt_secret in ("", "change-me"):
        errors.append("JWT_SECRET is unset or still the default. Tokens would be forgeable.")
        print("FAIL JWT_SECRET")
    else:
        print("OK  JWT_SECRET set")

    # 3) DB connection and schema
    try:
        from sqlalchemy import inspect, text
        from gymapp.db.session import engine
        from gymapp.db.tables import ALL_TABLE_NAMES
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("OK  Database connection (DATABASE_URL)")
        missing = set(ALL_TABLE_NAMES) - set(inspect(engine).get_table_names())
        if missing:
            errors.append(f"Tables missing: {', '.join(sorted(missing))}. Run: alembic upgrade head")
            print("FAIL Schema:", ", ".join(sorted(missing)))
        else:
            print("OK  Schema (all tables present)")
    except Exception as e:
        errors.append(f"Database: {e}")
        print("FAIL Database:", e)

    # 4) App import (catches missing deps, bad imports)
    try:
        from gymapp.main import app  # noqa: F401
        print("OK  App import (gymapp.main)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)
        return 1

    # 5) Optional collaborators
    if not settings.openai_api_key:
        print("WARN OPENAI_API_KEY not set: /ai/suggestions will fail")
    if not settings.stripe_secret_key:
        print("WARN STRIPE_SECRET_KEY not set: /payments/stripe will fail")

    # 6) Port 8000
    try:
        import socket
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", 8000))
        print("OK  Port 8000 is free")
    except OSError:
        errors.append("Port 8000 is in use. Stop the other process or use another port (e.g. --port 8001).")
        print("FAIL Port 8000 is in use")

    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        return 1

    print("\nAll checks passed. Start with: uvicorn gymapp.main:app --reload --port 8000")
    return 0


if __name__ == "__main__":
    sys.exit(main())
