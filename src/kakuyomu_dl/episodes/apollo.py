"""Parser for the Apollo cache embedded in Kakuyomu table-of-contents pages.

The page ships its GraphQL client cache as JSON inside ``#__NEXT_DATA__``.
The cache is a flat store keyed by ``<Typename>:<id>``; records point at
each other through ``{"__ref": "<key>"}`` objects rather than nesting.
"""

import json
import re
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import BaseModel

WORK_PREFIX = "Work:"
EPISODE_KEY_RE = re.compile(r"^Episode:\d+")


class WorkRecord(BaseModel):
    """A ``Work:<id>`` record."""

    key: str
    id: str


class EpisodeRecord(BaseModel):
    """An ``Episode:<id>`` record."""

    key: str
    id: str
    title: str
    published_at: str | None = None
    work_ref: str | None = None  # Key of the owning Work record


class ApolloStateError(ValueError):
    """Raised when the embedded state blob is missing or malformed."""

    pass


class ApolloStore:
    """Typed view over a normalized key→record cache."""

    def __init__(self, records: Mapping[str, Any]) -> None:
        self.records = records

    @classmethod
    def from_next_data(cls, raw: str) -> "ApolloStore":
        """Build a store from the text content of ``#__NEXT_DATA__``.

        Raises:
            ApolloStateError: If the JSON is invalid or holds no Apollo state
        """
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ApolloStateError(f"__NEXT_DATA__ is not valid JSON: {e}") from e

        state = (
            data.get("props", {}).get("pageProps", {}).get("__APOLLO_STATE__")
            if isinstance(data, dict)
            else None
        )
        if not isinstance(state, dict):
            raise ApolloStateError("__NEXT_DATA__ has no __APOLLO_STATE__ store")

        return cls(state)

    def resolve(self, ref: Any) -> Mapping[str, Any] | None:
        """Follow a ``{"__ref": key}`` link to its record."""
        if not isinstance(ref, dict):
            return None
        key = ref.get("__ref")
        if not isinstance(key, str):
            return None
        record = self.records.get(key)
        return record if isinstance(record, dict) else None

    def work(self) -> WorkRecord | None:
        """Return the first Work record in the store."""
        for key, record in self.records.items():
            if key.startswith(WORK_PREFIX) and isinstance(record, dict):
                return WorkRecord(key=key, id=str(record.get("id") or ""))
        return None

    def episodes(self) -> Iterator[EpisodeRecord]:
        """Yield Episode records in store order."""
        for key, record in self.records.items():
            if not EPISODE_KEY_RE.match(key) or not isinstance(record, dict):
                continue

            work = record.get("work")
            work_ref = work.get("__ref") if isinstance(work, dict) else None
            published = record.get("publishedAt")

            yield EpisodeRecord(
                key=key,
                id=str(record.get("id") or key.split(":", 1)[1]),
                title=str(record.get("title") or ""),
                published_at=str(published) if published else None,
                work_ref=work_ref if isinstance(work_ref, str) else None,
            )

    def work_id_for(self, episode: EpisodeRecord, default: str = "") -> str:
        """Resolve the owning work id of an episode through its weak reference."""
        if episode.work_ref is None:
            return default
        work = self.resolve({"__ref": episode.work_ref})
        if work and work.get("id"):
            return str(work["id"])
        return default
