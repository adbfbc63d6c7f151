"""Aozora Bunko text conversion for Kakuyomu episodes."""

from kakuyomu_dl.aozora.body import extract_body
from kakuyomu_dl.aozora.formatter import format_chapter
from kakuyomu_dl.aozora.markup import convert_markup

__all__ = ["extract_body", "convert_markup", "format_chapter"]
