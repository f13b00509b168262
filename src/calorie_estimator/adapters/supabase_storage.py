"""Supabase repository for single-record app state."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from calorie_estimator.domain.errors import PersistenceFailureError
from calorie_estimator.services.history import KeyValueStorage


@dataclass
class SupabaseStorage(KeyValueStorage):
    """Supabase-backed key/value records scoped to a device."""

    client: Client
    device_id: str
    table: str = "app_state"

    def read(self, key: str) -> str | None:
        """Return the stored value for a key."""
        try:
            response = (
                self.client.table(self.table)
                .select("value")
                .eq("device_id", self.device_id)
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise PersistenceFailureError(f"Failed to read {key}") from exc
        if not response.data:
            return None
        return response.data[0].get("value")

    def write(self, key: str, value: str) -> None:
        """Insert or replace the value for a key."""
        try:
            self.client.table(self.table).upsert(
                {
                    "device_id": self.device_id,
                    "key": key,
                    "value": value,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="device_id,key",
            ).execute()
        except Exception as exc:
            raise PersistenceFailureError(f"Failed to write {key}") from exc

    def remove(self, key: str) -> None:
        """Delete the value for a key."""
        try:
            self.client.table(self.table).delete().eq("device_id", self.device_id).eq(
                "key", key
            ).execute()
        except Exception as exc:
            raise PersistenceFailureError(f"Failed to remove {key}") from exc
