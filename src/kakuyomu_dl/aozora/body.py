"""Episode body extraction from Kakuyomu chapter pages."""

import logging

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

BODY_CONTAINER_CLASS = "widget-episodeBody"


def extract_body(page_html: str) -> str:
    """Return the inner markup of the episode body container.

    Args:
        page_html: Full chapter page HTML

    Returns:
        Inner markup of the container, or an empty string if the page has none
    """
    soup = BeautifulSoup(page_html, "html.parser")
    container = soup.find(class_=BODY_CONTAINER_CLASS)

    if container is None:
        logger.warning(
            f"No .{BODY_CONTAINER_CLASS} container found; chapter will be empty"
        )
        return ""

    return container.decode_contents()
