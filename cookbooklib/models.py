from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .exceptions import CookbookRetrievalError

NOT_FOUND_ERROR_CODE = "NOT_FOUND"


@dataclass(frozen=True, slots=True)
class Version:
    version: str
    file_location: str

    def get_version(self) -> str:
        return self.version

    def get_file_location(self) -> str:
        return self.file_location

    @classmethod
    def from_dict(cls, data: Any) -> Version:
        if not isinstance(data, Mapping):
            raise CookbookRetrievalError(f"Version payload is not an object: {data!r}")
        version = data.get("version")
        file_location = data.get("file")
        if not version or not file_location:
            raise CookbookRetrievalError(
                f"Version payload is missing 'version' or 'file': {dict(data)!r}"
            )
        return cls(version=str(version), file_location=str(file_location))


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    """Error envelope the index service sends alongside a 404."""

    error_code: str | None = None
    error_messages: list[str] = field(default_factory=list)

    @property
    def is_not_found(self) -> bool:
        return self.error_code == NOT_FOUND_ERROR_CODE

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ErrorResponse:
        error_code = data.get("error_code")
        return cls(
            error_code=str(error_code) if error_code is not None else None,
            error_messages=[str(message) for message in data.get("error_messages") or []],
        )
