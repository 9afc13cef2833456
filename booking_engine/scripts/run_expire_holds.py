from __future__ import annotations

import logging

from booking_engine.db.session import SessionLocal
from booking_engine.services.audit_service import write_audit_log
from booking_engine.services.hold_service import expire_stale_holds

logger = logging.getLogger(__name__)


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    db = SessionLocal()
    try:
        count = expire_stale_holds(db)
        if not count:
            logger.info("no_targets")
            return 0

        write_audit_log(
            db,
            actor_id=None,
            action_type="HOLD_SWEEP",
            target_type="hold",
            target_id="bulk",
            summary="Marked stale holds as expired",
            diff_json={"count": count},
            request=None,
        )
        logger.info("expired: %d", count)
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
