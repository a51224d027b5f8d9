"""Template loading and transcript rendering utilities."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from webchat.conversations.models import Conversation, Message
from webchat.formatting.formatter import format_message

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
MESSAGE_TEMPLATE = "message.html"
TRANSCRIPT_TEMPLATE = "transcript.html"


@dataclass(frozen=True)
class TemplateEntry:
    """Loaded template content and metadata."""

    content: str
    metadata: dict[str, Any]


class FrontMatterLoader(FileSystemLoader):
    """Jinja2 loader that strips YAML front matter."""

    def get_source(self, environment: Environment, template: str):  # type: ignore[override]
        source, filename, uptodate = super().get_source(environment, template)
        if source.startswith("---"):
            parts = source.split("---", 2)
            if len(parts) == 3:
                source = parts[2].lstrip()
        return source, filename, uptodate


class TemplateRenderer:
    """Load and render HTML templates carrying optional YAML front matter."""

    def __init__(self, templates_dir: Path | str | None = None) -> None:
        self.templates_dir = Path(templates_dir) if templates_dir else TEMPLATES_DIR
        self.cache: dict[str, TemplateEntry] = {}
        self._env = Environment(loader=FrontMatterLoader(str(self.templates_dir)))

    def load(self, template_name: str) -> str:
        """Load template body (front matter removed)."""
        if template_name in self.cache:
            return self.cache[template_name].content

        file_path = self.templates_dir / template_name
        if not file_path.exists():
            raise FileNotFoundError(f"Template not found: {file_path}")

        content = file_path.read_text(encoding="utf-8")
        metadata: dict[str, Any] = {}
        body = content

        if content.startswith("---"):
            parts = content.split("---", 2)
            if len(parts) == 3:
                metadata = yaml.safe_load(parts[1]) or {}
                body = parts[2].lstrip()

        self.cache[template_name] = TemplateEntry(content=body, metadata=metadata)
        return body

    def get_metadata(self, template_name: str) -> dict[str, Any]:
        """Return front matter for a template (loads if needed)."""
        if template_name not in self.cache:
            self.load(template_name)
        return self.cache[template_name].metadata

    def render(self, template_name: str, **variables: Any) -> str:
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFound as exc:
            raise FileNotFoundError(f"Template not found: {template_name}") from exc
        return template.render(**variables)

    def render_message(self, message: Message, *, escape_html: bool = False) -> str:
        """Render one message with the avatar matching its type."""
        avatars = self.get_metadata(MESSAGE_TEMPLATE).get("avatars", {})
        return self.render(
            MESSAGE_TEMPLATE,
            message_type=message.type.value,
            avatar=avatars.get(message.type.value, ""),
            body=format_message(message.text, escape_html=escape_html),
        ).strip()

    def render_transcript(
        self,
        conversation: Conversation,
        *,
        theme: str = "light",
        escape_html: bool = False,
    ) -> str:
        """Render a standalone HTML page for a whole conversation."""
        return self.render(
            TRANSCRIPT_TEMPLATE,
            title=conversation.title,
            timestamp=conversation.timestamp,
            theme=theme,
            messages=[
                self.render_message(message, escape_html=escape_html)
                for message in conversation.messages
            ],
        )


@lru_cache
def get_renderer() -> TemplateRenderer:
    return TemplateRenderer()


def render_message(message: Message, *, escape_html: bool = False) -> str:
    return get_renderer().render_message(message, escape_html=escape_html)


def render_transcript(
    conversation: Conversation,
    *,
    theme: str = "light",
    escape_html: bool = False,
) -> str:
    return get_renderer().render_transcript(conversation, theme=theme, escape_html=escape_html)
