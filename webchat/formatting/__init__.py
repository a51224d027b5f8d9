"""Message formatting and transcript rendering."""

from .formatter import (
    FORMAT_PIPELINE,
    convert_lists,
    convert_newlines,
    format_message,
    linkify_bare_domains,
    linkify_urls,
    strip_emphasis,
)
from .render import TemplateRenderer, render_message, render_transcript

__all__ = [
    "FORMAT_PIPELINE",
    "TemplateRenderer",
    "convert_lists",
    "convert_newlines",
    "format_message",
    "linkify_bare_domains",
    "linkify_urls",
    "render_message",
    "render_transcript",
    "strip_emphasis",
]
