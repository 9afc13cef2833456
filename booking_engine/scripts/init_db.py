from __future__ import annotations

import argparse
import logging

from booking_engine.db.base import Base
from booking_engine.db.session import engine

# Import models to register with SQLAlchemy
import booking_engine.models  # noqa: F401

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the booking engine tables")
    parser.add_argument("--drop", action="store_true", help="drop existing tables first (destroys data)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if args.drop:
        Base.metadata.drop_all(bind=engine)
        logger.info("Dropped tables")

    Base.metadata.create_all(bind=engine)

    logger.info("DB initialized (%s)", engine.url.render_as_string(hide_password=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
