from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.exc import ProgrammingError

from parkboard.db.base import Base
from parkboard.db.session import engine

# Import models to register with SQLAlchemy
import parkboard.models  # noqa: F401

logger = logging.getLogger(__name__)


def main() -> int:
    logging.basicConfig(level=logging.INFO)

    # Extensions needed for exclusion constraints (overlap prevention)
    with engine.begin() as conn:
        conn.execute(text("CREATE EXTENSION IF NOT EXISTS btree_gist"))

    # Create tables
    Base.metadata.create_all(bind=engine)

    # No two confirmed bookings on the same slot may overlap (half-open ranges)
    try:
        with engine.begin() as conn:
            conn.execute(
                text(
                    """
                    ALTER TABLE bookings
                    ADD CONSTRAINT bookings_no_overlap
                    EXCLUDE USING gist (
                        slot_id WITH =,
                        tstzrange(start_time, end_time, '[)') WITH &&
                    )
                    WHERE (status = 'confirmed');
                    """
                )
            )
    except ProgrammingError:
        logger.info("bookings_no_overlap already exists")

    print("DB initialized")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
