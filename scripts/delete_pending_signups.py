"""
Delete pending signups from the database.

Usage (from project root):
  python scripts/delete_pending_signups.py                 # expired only
  python scripts/delete_pending_signups.py --all           # every pending signup
  python scripts/delete_pending_signups.py --phone 9999999999
"""
import os
import sys
import argparse

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.database import SessionLocal
from app.models.pending_signup import PendingSignup
from app.services.pending_cleanup import delete_expired_pending_signups


def main():
    parser = argparse.ArgumentParser(description="Delete pending signups")
    parser.add_argument("--phone", type=str, default=None, help="Only the pending signup for this phone")
    parser.add_argument("--all", action="store_true", help="Delete every pending signup, expired or not")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        if args.phone:
            deleted = db.query(PendingSignup).filter(PendingSignup.phone == args.phone.strip()).delete()
            db.commit()
        elif args.all:
            deleted = db.query(PendingSignup).delete()
            db.commit()
        else:
            deleted = delete_expired_pending_signups(db)
        print(f"Deleted {deleted} pending signup(s).")
    finally:
        db.close()


if __name__ == "__main__":
    main()
