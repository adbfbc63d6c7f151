"""Data models for Kakuyomu episodes."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class Episode(BaseModel):
    """A single chapter page of a serialized work."""

    model_config = ConfigDict(frozen=True)

    title: str
    url: str  # Absolute chapter URL, also the identity key
    published_at: str | None = None  # ISO-8601 timestamp when the source provides one

    @property
    def published_date(self) -> date | None:
        """Publication date parsed from ``published_at``, if it is parseable."""
        if not self.published_at:
            return None
        try:
            return datetime.fromisoformat(self.published_at.replace("Z", "+00:00")).date()
        except ValueError:
            return None
