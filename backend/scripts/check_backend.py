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
        errors.append("backend/.env missing. Set DATABASE_URL, YELP_API_KEY and JWT_SECRET there.")
    else:
        print("OK  .env exists")

    # 2) Credentials: search/detail need Yelp, mutating routes need the JWT secret
    from app.config import settings

    if settings.yelp_api_key:
        print("OK  YELP_API_KEY set")
    else:
        errors.append("YELP_API_KEY is empty; search and venue detail will return 503.")
        print("FAIL YELP_API_KEY")
    if settings.jwt_secret:
        print("OK  JWT_SECRET set")
    else:
        errors.append("JWT_SECRET is empty; every authenticated route will return 401.")
        print("FAIL JWT_SECRET")

    # 3) DB connection and schema
    try:
        from sqlalchemy import inspect, text

        from app.db.session import engine
        from app.db.tables import ALL_TABLE_NAMES

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("OK  Database connection (DATABASE_URL)")
        missing = set(ALL_TABLE_NAMES) - set(inspect(engine).get_table_names())
        if missing:
            errors.append(f"Tables missing: {sorted(missing)}. Run: alembic upgrade head")
            print("FAIL Schema:", sorted(missing))
        else:
            print("OK  Schema up to date")
    except Exception as e:
        errors.append(f"Database: {e}")
        print("FAIL Database:", e)

    # 4) App import (catches missing deps, bad imports)
    try:
        from app.main import app  # noqa: F401
        print("OK  App import (app.main)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)

    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        print("\nThen start backend: uvicorn app.main:app --reload --port 8000")
        return 1

    print("\nAll checks passed. Start with: uvicorn app.main:app --reload --port 8000")
    return 0


if __name__ == "__main__":
    sys.exit(main())
