"""Convert Kakuyomu episode body markup into Aozora Bunko annotated text.

The rewrite steps run in a fixed order. Ruby and emphasis are rewritten
into annotation tokens before the generic tag stripper runs, otherwise
the stripper would destroy the structure they are recognised by.
"""

import re

RUBY_OPEN = "｜"
RUBY_GLOSS_OPEN = "《"
RUBY_GLOSS_CLOSE = "》"
EMPHASIS_OPEN = "［＃傍点］"
EMPHASIS_CLOSE = "［＃傍点終わり］"

# Full-width punctuation mapped to half-width for vertical-text readers
PUNCTUATION_MAP = {
    "！！": "!!",
    "！？": "!?",
}

_LINE_BREAK_RE = re.compile(r"<br\b[^>]*>(?:\r?\n)?", re.IGNORECASE)
_RUBY_RE = re.compile(
    r"<ruby>(?:<rb>)?(.+?)(?:</rb>)?(?:<rp>[^<]*</rp>)?"
    r"<rt>(.+?)</rt>(?:<rp>[^<]*</rp>)?</ruby>"
)
_EMPHASIS_RE = re.compile(r"<em\b[^>]*>(.+?)</em>")
_TAG_RE = re.compile(r"<[^>]+>")
_BLANK_LINE_RE = re.compile(r"^[^\S\n]+$", re.MULTILINE)


def convert_line_breaks(text: str) -> str:
    """Turn every ``<br>`` variant, plus a trailing newline, into one newline."""
    return _LINE_BREAK_RE.sub("\n", text)


def convert_ruby(text: str) -> str:
    """Rewrite ``<ruby>漢字<rt>かんじ</rt></ruby>`` as ``｜漢字《かんじ》``."""
    return _RUBY_RE.sub(
        lambda m: f"{RUBY_OPEN}{m.group(1)}{RUBY_GLOSS_OPEN}{m.group(2)}{RUBY_GLOSS_CLOSE}",
        text,
    )


def convert_emphasis(text: str) -> str:
    """Rewrite ``<em>強調</em>`` as a dot-emphasis instruction pair."""
    return _EMPHASIS_RE.sub(lambda m: f"{EMPHASIS_OPEN}{m.group(1)}{EMPHASIS_CLOSE}", text)


def strip_tags(text: str) -> str:
    """Delete remaining tags; character references are left as serialized."""
    return _TAG_RE.sub("", text)


def normalize_blank_lines(text: str) -> str:
    """Reduce whitespace-only lines to empty lines."""
    return _BLANK_LINE_RE.sub("", text)


def replace_punctuation(text: str) -> str:
    for source, target in PUNCTUATION_MAP.items():
        text = text.replace(source, target)
    return text


def convert_markup(fragment: str) -> str:
    """Convert a raw episode body fragment into Aozora Bunko annotated text.

    Args:
        fragment: Inner markup of the episode body container

    Returns:
        Plain text with ruby and emphasis annotations, trimmed
    """
    text = convert_line_breaks(fragment)
    text = convert_ruby(text)
    text = convert_emphasis(text)
    text = strip_tags(text)
    text = normalize_blank_lines(text)
    text = replace_punctuation(text)
    return text.strip()
