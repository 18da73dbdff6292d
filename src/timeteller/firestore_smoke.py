"""Round-trip a config and a user timezone through Firestore.

Usage:
    python -m timeteller.firestore_smoke
"""

from __future__ import annotations

from google.api_core import exceptions as gexc

from timeteller.config import load_config
from timeteller.firestore_client import init_firestore
from timeteller.modules.time_teller import repo
from timeteller.modules.time_teller.config import TimeTellerConfig
from timeteller.modules.time_teller.models import UserTimezone

SMOKE_GUILD_ID = 0
SMOKE_USER_ID = 0


def main() -> int:
    config = load_config()
    client = init_firestore(config)

    if client is None:
        raise SystemExit(
            "Firebase is disabled. Set FIREBASE_ENABLED=true (and credentials) in .env."
        )

    try:
        repo.save_config(client, TimeTellerConfig(guild_id=SMOKE_GUILD_ID))
        repo.save_user_timezone(
            client, UserTimezone(user_id=SMOKE_USER_ID, timezone="UTC")
        )
        saved = repo.get_user_timezones(client, [SMOKE_USER_ID])
        repo.delete_user_timezone(client, SMOKE_USER_ID)
    except gexc.NotFound:
        raise SystemExit(
            "Firestore database not found for this project.\n"
            "Enable Firestore in Firebase Console (Build -> Firestore Database -> Create database),\n"
            "then re-run this smoke test.\n"
            "If you enabled it already, double-check FIREBASE_PROJECT_ID points at the right project."
        )
    except gexc.PermissionDenied:
        raise SystemExit(
            "Permission denied talking to Firestore.\n"
            "Check that your service account JSON is for the same project and has Firestore access."
        )

    if SMOKE_USER_ID not in saved:
        raise SystemExit("Firestore smoke test FAILED: timezone was not read back.")

    print("Firestore smoke test OK.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
