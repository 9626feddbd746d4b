from __future__ import annotations

from typing import Iterable
import re
import urllib.parse


def version_from_locator(locator: str) -> str:
    """Canonical version of a version locator.

    The index names each version resource after its version with ``_`` in
    place of ``.``, so ``.../versions/1_0_0`` is version ``1.0.0``.
    """
    path = urllib.parse.urlparse(str(locator)).path.rstrip("/")
    return path.rsplit("/", 1)[-1].replace("_", ".")


def map_version_locators(locators: Iterable[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for locator in locators:
        mapping[version_from_locator(locator)] = str(locator)
    return mapping


def version_key(value: str) -> tuple:
    parts = re.split(r"[.\-+_]", value)
    key: list[tuple[int, int | str]] = []
    for part in parts:
        if part.isdigit():
            key.append((1, int(part)))
        else:
            key.append((0, part))
    return tuple(key)
