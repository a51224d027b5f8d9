"""
Message Formatter

Turns raw message text into display markup. The transformation is a fixed
pipeline of pure text stages:

1. strip_emphasis       - drop ``**bold**`` and ``*italic*`` markers
2. convert_lists        - numbered, ``*`` and ``-`` line runs become list blocks
3. linkify_urls         - absolute http/https/ftp/file URLs become links
4. linkify_bare_domains - ``www.`` tokens become https links
5. convert_newlines     - remaining newlines become ``<br>``

Later stages rely on earlier ones having run, so the order is fixed.

Usage:
    from webchat.formatting import format_message

    markup = format_message("**Hello** World")
"""

import html
import re
from collections.abc import Callable

BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")
ITALIC_PATTERN = re.compile(r"\*(.+?)\*")

NUMBERED_ITEM_PATTERN = re.compile(r"^\s*\d+\.\s+(.*)$")
ASTERISK_ITEM_PATTERN = re.compile(r"^\s*\*\s+(.*)$")
DASH_ITEM_PATTERN = re.compile(r"^\s*-\s+(.*)$")
LIST_ITEM_PATTERNS = (NUMBERED_ITEM_PATTERN, ASTERISK_ITEM_PATTERN, DASH_ITEM_PATTERN)

URL_PATTERN = re.compile(
    r"\b(?:https?|ftp|file)://[-A-Z0-9+&@#/%?=~_|!:,.;]*[-A-Z0-9+&@#/%=~_|]",
    re.IGNORECASE,
)
BARE_DOMAIN_PATTERN = re.compile(r"(^|\s)(www\.[^\s<]*[^\s<.,;:!?)])")
NEWLINE_PATTERN = re.compile(r"\r?\n")

LINK_LABEL_MAX_CHARS = 50
LINK_LABEL_KEEP_CHARS = 47
ELLIPSIS = "..."


def strip_emphasis(text: str) -> str:
    """Collapse paired ``**`` then paired ``*`` markers to their inner text."""
    text = BOLD_PATTERN.sub(r"\1", text)
    return ITALIC_PATTERN.sub(r"\1", text)


def _convert_list_run(text: str, item_pattern: re.Pattern[str]) -> str:
    output: list[str] = []
    items: list[str] = []

    def flush() -> None:
        if items:
            output.append("<ol>" + "".join(f"<li>{item}</li>" for item in items) + "</ol>")
            items.clear()

    for line in text.split("\n"):
        match = item_pattern.match(line)
        if match is None:
            flush()
            output.append(line)
            continue
        if not items and output and output[-1].strip():
            # Separate the list from preceding prose
            output.append("")
        items.append(match.group(1))
    flush()
    return "\n".join(output)


def convert_lists(text: str) -> str:
    """
    Group consecutive list lines into list blocks.

    Runs one pass per bullet style (numbered, asterisk, dash). Each pass sees
    the output of the previous one, so a block built by an earlier pass is
    plain text to the later passes.
    """
    for item_pattern in LIST_ITEM_PATTERNS:
        text = _convert_list_run(text, item_pattern)
    return text


def _link_label(text: str) -> str:
    if len(text) > LINK_LABEL_MAX_CHARS:
        return text[:LINK_LABEL_KEEP_CHARS] + ELLIPSIS
    return text


def _anchor(href: str, label: str) -> str:
    return f'<a href="{href}" target="_blank" rel="noopener noreferrer">{_link_label(label)}</a>'


def linkify_urls(text: str) -> str:
    """Wrap absolute URLs in links, shortening long labels."""
    return URL_PATTERN.sub(lambda match: _anchor(match.group(0), match.group(0)), text)


def linkify_bare_domains(text: str) -> str:
    """Link ``www.`` tokens that start the text or follow whitespace."""
    return BARE_DOMAIN_PATTERN.sub(
        lambda match: match.group(1) + _anchor(f"https://{match.group(2)}", match.group(2)),
        text,
    )


def convert_newlines(text: str) -> str:
    return NEWLINE_PATTERN.sub("<br>", text)


FORMAT_PIPELINE: tuple[Callable[[str], str], ...] = (
    strip_emphasis,
    convert_lists,
    linkify_urls,
    linkify_bare_domains,
    convert_newlines,
)


def format_message(text: str, *, escape_html: bool = False) -> str:
    """
    Convert raw message text to display markup.

    Args:
        text: Raw message text
        escape_html: HTML-escape the raw text before formatting. Off by
            default, which inserts user and assistant text verbatim.

    Returns:
        Markup ready to insert into the transcript
    """
    if escape_html:
        text = html.escape(text, quote=False)
    text = text.replace("\r\n", "\n")
    for stage in FORMAT_PIPELINE:
        text = stage(text)
    return text
