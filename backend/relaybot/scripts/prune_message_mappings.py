"""Delete old admin-message -> guest correlations.

Run periodically (e.g. daily) from the backend environment. Replies to pruned
messages get the usual "could not find original sender" notice.

Env:
  - DATABASE_URL
  - MESSAGE_RETENTION_DAYS (default 90, 0 = keep forever)
  - DRY_RUN=1 only prints the cutoff
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

from relaybot.core.config import settings
from relaybot.core.db import SessionLocal
from relaybot.services import correlator

DRY_RUN = os.getenv("DRY_RUN", "").strip() in ("1", "true", "yes")


def retention_cutoff(now: datetime, days: int) -> datetime | None:
    if days <= 0:
        return None
    return now - timedelta(days=days)


def main() -> int:
    cutoff = retention_cutoff(datetime.now(timezone.utc), settings.MESSAGE_RETENTION_DAYS)
    if cutoff is None:
        print("retention disabled (MESSAGE_RETENTION_DAYS=0)")
        return 0
    if DRY_RUN:
        print(f"DRY_RUN: would delete mappings created before {cutoff.isoformat()}")
        return 0

    with SessionLocal() as db:
        return correlator.prune(db, older_than=cutoff)


if __name__ == "__main__":
    n = main()
    print(f"deleted={n}")
