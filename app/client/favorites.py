"""
Client-side favorites cache.

Keeps a local set of favorite ad ids per identity so the UI can answer
``is_favorite`` without a round trip, and reconciles it with the API. The
server is authoritative: every successful load overwrites the local copy.
"""

import json
import os
from enum import Enum
from pathlib import Path
from typing import Optional
import httpx

from app.utils.logger import logger

GUEST_KEY = "favorites:guest"


class LocalStorage:
    """A tiny JSON-file key/value store standing in for device storage."""

    def __init__(self, path):
        self.path = Path(path)

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text(encoding="utf-8") or "{}")

    def get(self, key: str):
        return self._read_all().get(key)

    def _write_all(self, data: dict):
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        os.replace(tmp, self.path)

    def set(self, key: str, value):
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str):
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)


class ToggleState(str, Enum):
    APPLIED = "applied"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"


class FavoritesClient:
    def __init__(
        self,
        http: httpx.Client,
        storage: LocalStorage,
        user_id: Optional[str] = None,
        token: Optional[str] = None,
    ):
        self.http = http
        self.storage = storage
        self.user_id = user_id
        self.token = token
        self.favorites: set[str] = set()
        # ad ids whose toggle is waiting on the server
        self.in_flight: dict[str, ToggleState] = {}

    @property
    def storage_key(self) -> str:
        return f"favorites:{self.user_id}" if self.user_id else GUEST_KEY

    @property
    def authenticated(self) -> bool:
        return bool(self.user_id and self.token)

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}

    def _persist(self):
        try:
            self.storage.set(self.storage_key, sorted(self.favorites))
        except (OSError, ValueError) as e:
            logger.error("Could not save favorites locally: %s", e)

    def _load_local(self):
        try:
            stored = self.storage.get(self.storage_key)
        except (OSError, ValueError) as e:
            # an unreadable cache counts as empty
            logger.error("Could not read local favorites: %s", e)
            stored = None

        self.favorites = set(stored or [])

    def load_favorites(self) -> set[str]:
        if not self.authenticated:
            self._load_local()
            return self.favorites

        try:
            response = self.http.get("/user/favorites", headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Could not load favorites from server, using local copy: %s", e)
            self._load_local()
            return self.favorites

        # server wins over whatever the cache holds
        self.favorites = set(response.json())
        self._persist()
        return self.favorites

    def is_favorite(self, ad_id: str) -> bool:
        return ad_id in self.favorites

    def toggle_favorite(self, ad_id: str) -> ToggleState:
        if ad_id in self.in_flight:
            # the earlier toggle decides; this one is dropped
            return self.in_flight[ad_id]

        removing = ad_id in self.favorites

        if removing:
            self.favorites.discard(ad_id)
        else:
            self.favorites.add(ad_id)

        if self.authenticated:
            self.in_flight[ad_id] = ToggleState.APPLIED
            method = "DELETE" if removing else "POST"
            try:
                response = self.http.request(
                    method,
                    f"/user/favorites/{ad_id}",
                    headers=self._headers(),
                )
                response.raise_for_status()
                state = ToggleState.CONFIRMED
            except httpx.HTTPError as e:
                # undo the optimistic flip
                if removing:
                    self.favorites.add(ad_id)
                else:
                    self.favorites.discard(ad_id)
                state = ToggleState.ROLLED_BACK
                logger.error("Could not sync favorite %s with the server: %s", ad_id, e)
            finally:
                self.in_flight.pop(ad_id, None)
        else:
            state = ToggleState.CONFIRMED

        # only terminal states reach storage
        self._persist()
        return state

    def clear(self):
        self.favorites = set()
        try:
            self.storage.remove(self.storage_key)
        except (OSError, ValueError) as e:
            logger.error("Could not clear local favorites: %s", e)
