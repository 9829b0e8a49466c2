#!/usr/bin/env python3
"""
Delete chatters older than the 24h retention window (same as the scheduled purge job).
Run: cd backend && python scripts/purge_expired_chatters.py
"""
import sys
from pathlib import Path

# backend/scripts/ -> backend/
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.db.session import SessionLocal
from app.services.chatter_service import purge_expired_chatters, retention_cutoff


def main():
    print(f"Purging chatters created at or before {retention_cutoff().isoformat()} ...")
    db = SessionLocal()
    try:
        removed = purge_expired_chatters(db)
    finally:
        db.close()
    print(f"Done. Removed {removed} expired chatters.")


if __name__ == "__main__":
    main()
