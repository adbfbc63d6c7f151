"""Aozora Bunko chapter envelope."""

PAGE_BREAK = "［＃改ページ］\n"
SEPARATOR = "▲▼" * 13 + "\n"
HEADING_OPEN = "［＃中見出し］"
HEADING_CLOSE = "［＃中見出し終わり］"


def format_chapter(body: str, title: str) -> str:
    """Wrap a converted chapter with page break, separators and a heading.

    An empty title still produces the heading block.
    """
    heading = f"\n{HEADING_OPEN}{title}{HEADING_CLOSE}\n\n\n"
    return PAGE_BREAK + SEPARATOR + heading + body + "\n\n" + SEPARATOR
