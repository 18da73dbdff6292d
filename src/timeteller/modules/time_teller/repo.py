from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from timeteller.modules.time_teller.config import TimeTellerConfig
from timeteller.modules.time_teller.models import UserTimezone

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient


# Collection names
CONFIGS_COLLECTION = "time_teller_configs"
USER_TIMEZONES_COLLECTION = "user_timezones"


def _guild_doc_id(guild_id: int) -> str:
    """Generate document ID for guild-level documents."""
    return str(guild_id)


def _user_doc_id(user_id: int) -> str:
    """Generate document ID for user timezone documents."""
    return str(user_id)


# --- Config CRUD ---


def get_config(firestore: FirestoreClient, guild_id: int) -> TimeTellerConfig | None:
    """Get the time teller configuration for a guild."""
    doc = firestore.collection(CONFIGS_COLLECTION).document(_guild_doc_id(guild_id)).get()
    if not doc.exists:
        return None
    return TimeTellerConfig.from_firestore(doc.to_dict())


def save_config(firestore: FirestoreClient, config: TimeTellerConfig) -> None:
    """Save or update a guild's time teller configuration."""
    firestore.collection(CONFIGS_COLLECTION).document(
        _guild_doc_id(config.guild_id)
    ).set(config.to_firestore(), merge=True)


# --- User Timezone CRUD ---


def get_user_timezone(firestore: FirestoreClient, user_id: int) -> UserTimezone | None:
    """Get a user's saved timezone."""
    doc = (
        firestore.collection(USER_TIMEZONES_COLLECTION)
        .document(_user_doc_id(user_id))
        .get()
    )
    if not doc.exists:
        return None
    return UserTimezone.from_firestore(doc.to_dict())


def get_user_timezones(
    firestore: FirestoreClient, user_ids: Iterable[int]
) -> dict[int, UserTimezone]:
    """Fetch saved timezones for many users in one round trip."""
    collection = firestore.collection(USER_TIMEZONES_COLLECTION)
    refs = [collection.document(_user_doc_id(user_id)) for user_id in user_ids]
    if not refs:
        return {}

    result: dict[int, UserTimezone] = {}
    for doc in firestore.get_all(refs):
        if not doc.exists:
            continue
        user_tz = UserTimezone.from_firestore(doc.to_dict())
        result[user_tz.user_id] = user_tz
    return result


def save_user_timezone(firestore: FirestoreClient, user_tz: UserTimezone) -> None:
    """Save or update a user's timezone."""
    firestore.collection(USER_TIMEZONES_COLLECTION).document(
        _user_doc_id(user_tz.user_id)
    ).set(user_tz.to_firestore(), merge=True)


def delete_user_timezone(firestore: FirestoreClient, user_id: int) -> None:
    """Delete a user's saved timezone."""
    firestore.collection(USER_TIMEZONES_COLLECTION).document(
        _user_doc_id(user_id)
    ).delete()
