from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping
import logging
import threading

from .exceptions import CookbookRetrievalError, VersionResolutionError
from .http import HttpClient
from .models import Version
from .utils import map_version_locators, version_from_locator, version_key

logger = logging.getLogger(__name__)


class Cookbook:
    """A cookbook listed by the index service.

    The version listing comes with the index response; the details of each
    version (archive location, version string) live behind a locator of their
    own and are fetched on first use, then kept for the life of the object.
    Lookups for the same version from several threads share a single fetch.
    """

    def __init__(
        self,
        name: str,
        latest_version_locator: str,
        version_locators: Mapping[str, str],
        http_client: HttpClient,
    ) -> None:
        self.name = name
        self.latest_version_locator = latest_version_locator
        self.version_locators: Mapping[str, str] = MappingProxyType(dict(version_locators))
        self.http_client = http_client

        latest = version_from_locator(latest_version_locator)
        if latest in self.version_locators:
            self.latest_version_id: str | None = latest
        else:
            self.latest_version_id = None
            logger.warning(
                "Latest version locator %s of cookbook %s is not among its %d listed versions",
                latest_version_locator,
                name,
                len(self.version_locators),
            )

        self._resolved: dict[str, Version] = {}
        self._lock = threading.Lock()
        self._version_locks: dict[str, threading.Lock] = {}

    @classmethod
    def from_payload(cls, payload: Any, http_client: HttpClient) -> Cookbook:
        if not isinstance(payload, Mapping):
            raise CookbookRetrievalError(f"Cookbook payload is not an object: {payload!r}")
        name = payload.get("name")
        latest = payload.get("latest_version")
        versions = payload.get("versions")
        if not name:
            raise CookbookRetrievalError(f"Cookbook payload has no name: {dict(payload)!r}")
        if not latest:
            raise CookbookRetrievalError(
                f"Cookbook {name} payload has no latest_version: {dict(payload)!r}"
            )
        if not isinstance(versions, list):
            raise CookbookRetrievalError(
                f"Cookbook {name} payload has no versions list: {dict(payload)!r}"
            )
        try:
            version_locators = map_version_locators(str(v) for v in versions)
            version_from_locator(str(latest))
        except ValueError as exc:
            raise CookbookRetrievalError(
                f"Cookbook {name} payload has an invalid version locator: {exc}"
            ) from exc
        return cls(
            name=str(name),
            latest_version_locator=str(latest),
            version_locators=version_locators,
            http_client=http_client,
        )

    def get_name(self) -> str:
        return self.name

    def get_versions(self) -> frozenset[str]:
        return frozenset(self.version_locators)

    def sorted_versions(self) -> list[str]:
        return sorted(self.version_locators, key=version_key, reverse=True)

    def get_latest_version(self) -> Version:
        if self.latest_version_id is None:
            raise VersionResolutionError(
                f"Latest version {self.latest_version_locator} of cookbook {self.name} "
                "does not match any listed version."
            )
        return self._resolve(
            self.latest_version_id, self.version_locators[self.latest_version_id]
        )

    def get_version(self, version_id: str) -> Version | None:
        cached = self._resolved.get(version_id)
        if cached is not None:
            logger.debug("Version %s of %s served from cache", version_id, self.name)
            return cached
        locator = self.version_locators.get(version_id)
        if locator is None:
            return None
        return self._resolve(version_id, locator)

    def _resolve(self, version_id: str, locator: str) -> Version:
        with self._lock_for(version_id):
            # Another thread may have finished the fetch while we waited.
            cached = self._resolved.get(version_id)
            if cached is not None:
                return cached
            version = self._fetch_version(version_id, locator)
            with self._lock:
                self._resolved[version_id] = version
            return version

    def _lock_for(self, version_id: str) -> threading.Lock:
        with self._lock:
            return self._version_locks.setdefault(version_id, threading.Lock())

    def _fetch_version(self, version_id: str, locator: str) -> Version:
        logger.debug("Resolving version %s of %s from %s", version_id, self.name, locator)
        try:
            return Version.from_dict(self.http_client.get_json(locator))
        except CookbookRetrievalError as exc:
            raise VersionResolutionError(
                f"Failed to resolve version {version_id} of cookbook {self.name} "
                f"from {locator}: {exc}"
            ) from exc

    def __repr__(self) -> str:
        return (
            f"Cookbook(name={self.name!r}, latest={self.latest_version_id!r}, "
            f"versions={len(self.version_locators)})"
        )
