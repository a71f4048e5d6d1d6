from __future__ import annotations

import logging

from parkboard.db.session import SessionLocal
from parkboard.services.audit_service import write_audit_log
from parkboard.services.quick_availability import sweep_expired_quick_postings


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    db = SessionLocal()
    try:
        cleared = sweep_expired_quick_postings(db)
        if not cleared:
            print("no_targets")
            return 0

        write_audit_log(
            db,
            actor_user_id=None,
            action_type="QUICK_AVAILABILITY_SWEEP",
            target_type="slot",
            target_id="bulk",
            summary="Swept expired quick availability",
            diff_json={"count": cleared},
            request=None,
        )
        print(f"cleared: {cleared}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
