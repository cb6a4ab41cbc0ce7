"""Seed the default weekly time slot catalog for ClassGrid.

Run:
  PYTHONPATH=backend python scripts/seed_time_slots.py
"""

from __future__ import annotations

import logging

from classgrid.db.bootstrap import ensure_runtime_schema_compatibility
from classgrid.db.seed import seed_time_slots
from classgrid.db.session import SessionLocal


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        created = seed_time_slots(session)
    print(f"Time slots created: {created}")


if __name__ == "__main__":
    main()
