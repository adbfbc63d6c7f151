"""Loader for crawl list files.

A list file holds one record per work, records separated by blank lines::

    title = "異世界の物語"
    file_name = isekai
    url = https://kakuyomu.jp/works/1177354054881234567
    update = 24-05-01

Records without a title are ignored.
"""

import re
from pathlib import Path

from pydantic import BaseModel

from kakuyomu_dl.utils.errors import ListFileError

_RECORD_SEPARATOR_RE = re.compile(r"\n{2,}")
_FIELD_RE = re.compile(r"^(title|file_name|url|update) *= *(.*)$")


class ListEntry(BaseModel):
    """One work in a crawl list."""

    title: str
    file_name: str | None = None
    url: str | None = None
    update: str | None = None


def _strip_quotes(value: str) -> str:
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def parse_list(content: str) -> list[ListEntry]:
    """Parse list file content into entries."""
    content = content.replace("\r\n", "\n")
    entries = []

    for block in _RECORD_SEPARATOR_RE.split(content):
        fields: dict[str, str] = {}
        for line in block.split("\n"):
            match = _FIELD_RE.match(line)
            if match and match.group(2):
                fields[match.group(1)] = _strip_quotes(match.group(2))

        if fields.get("title"):
            entries.append(ListEntry(**fields))

    return entries


def load_list(path: Path) -> list[ListEntry]:
    """Read and parse a list file.

    Raises:
        ListFileError: If the file cannot be read
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ListFileError(f"Cannot read list file {path}: {e}") from e

    return parse_list(content)
