from __future__ import annotations

import html2text

__all__ = ["html_to_markdown"]


def html_to_markdown(html: str) -> str:
    """Convert a clipboard HTML fragment to markdown text."""
    if not html:
        return ""
    converter = html2text.HTML2Text()
    converter.body_width = 0  # keep paragraphs on one line
    converter.ignore_images = False
    converter.ignore_links = False
    return converter.handle(html).strip("\n")
