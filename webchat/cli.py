"""
WebChat CLI

Command-line interface for chatting with the webhook assistant and managing
locally stored conversations.

Usage:
    webchat chat                           # Interactive REPL mode
    webchat ask "What's on my calendar?"   # Single message mode
    webchat list                           # List saved conversations
    webchat show <id>                      # Print one transcript
    webchat delete <id>                    # Delete a conversation
    webchat export <id> -o chat.html       # Write an HTML transcript
    webchat theme toggle                   # Show or change the theme
"""

import asyncio
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from webchat import __version__
from webchat.config import Settings, get_settings
from webchat.conversations import Conversation, ConversationStore, Message, MessageType
from webchat.formatting import render_transcript
from webchat.local_storage import JsonFileStorage
from webchat.session import ChatSession
from webchat.theme import THEMES, ThemeStore
from webchat.webhook import WebhookClient

console = Console()

EXIT_COMMANDS = {"exit", "quit", "/exit", "/quit"}


def configure_cli_logging(verbose: bool = False) -> None:
    """Application logs only with --verbose or DEBUG=true; otherwise quiet."""
    settings = get_settings()
    if verbose or settings.debug:
        settings.logging.configure()
        return
    logging.basicConfig(level=logging.WARNING)
    for logger_name in ("webchat", "httpx", "httpcore", "asyncio"):
        logging.getLogger(logger_name).setLevel(logging.CRITICAL)


# ============================================================================
# Helper Functions
# ============================================================================


def build_storage(settings: Settings) -> JsonFileStorage:
    return JsonFileStorage(settings.storage.path)


def build_client(settings: Settings) -> WebhookClient:
    """Create the webhook client from configuration."""
    if settings.webhook.url is None:
        console.print("[red]No webhook configured.[/red]")
        console.print("[yellow]Hint: Set WEBHOOK_URL in .env or the environment.[/yellow]")
        raise click.ClickException("Missing webhook URL")
    return WebhookClient(
        str(settings.webhook.url),
        route=settings.webhook.route,
        timeout=settings.webhook.timeout,
    )


def _require_conversation(store: ConversationStore, conversation_id: str) -> Conversation:
    conversation = store.get(conversation_id)
    if conversation is None:
        raise click.ClickException(f"Conversation not found: {conversation_id}")
    return conversation


def print_message(message: Message) -> None:
    if message.type is MessageType.USER:
        console.print(Panel(message.text, title="[bold cyan]You[/bold cyan]", border_style="cyan"))
    else:
        console.print(
            Panel(Markdown(message.text), title="[bold green]Assistant[/bold green]")
        )


def print_conversations(conversations: list[Conversation]) -> None:
    if not conversations:
        console.print("[yellow]No conversations yet. Start a new chat![/yellow]")
        return
    table = Table(title="Conversations", show_header=True, header_style="bold cyan")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Preview")
    table.add_column("Messages", justify="right")
    for conversation in conversations:
        table.add_row(
            conversation.id,
            conversation.title,
            conversation.preview,
            str(len(conversation.messages)),
        )
    console.print(table)


async def _send_and_print(session: ChatSession, text: str) -> None:
    with console.status("[cyan]Waiting for reply...[/cyan]", spinner="dots"):
        reply = await session.send(text)
    if reply is not None:
        print_message(reply)


# ============================================================================
# Commands
# ============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="WebChat")
@click.option("-v", "--verbose", is_flag=True, help="Show application logs.")
def cli(verbose: bool):
    """WebChat - chat with a webhook assistant and keep local history."""
    configure_cli_logging(verbose)


@cli.command()
@click.option("--conversation", "conversation_id", help="Resume an existing conversation.")
def chat(conversation_id: str | None):
    """Interactive REPL mode for conversations."""
    settings = get_settings()
    store = ConversationStore(build_storage(settings))
    if conversation_id:
        _require_conversation(store, conversation_id)
    client = build_client(settings)

    console.print(
        Panel.fit(
            f"[bold green]{settings.app_name} Interactive Mode[/bold green]\n"
            "Type a message to chat. Commands: /new, /list, /exit.",
            border_style="green",
        )
    )

    async def run_chat():
        session = ChatSession(store, client)
        if conversation_id:
            for message in session.open_conversation(conversation_id).messages:
                print_message(message)
        try:
            while True:
                try:
                    text = console.input("[bold cyan]You:[/bold cyan] ")
                except (EOFError, KeyboardInterrupt):
                    console.print("\n[yellow]Goodbye![/yellow]")
                    break

                command = text.strip().lower()
                if not command:
                    continue
                if command in EXIT_COMMANDS:
                    console.print("[yellow]Goodbye![/yellow]")
                    break
                if command == "/new":
                    conversation = session.start_new_chat()
                    console.print(f"[green]Started {conversation.id}[/green]")
                    continue
                if command == "/list":
                    print_conversations(store.list())
                    continue

                await _send_and_print(session, text)
        finally:
            await client.aclose()

    asyncio.run(run_chat())


@cli.command()
@click.argument("text")
@click.option("--conversation", "conversation_id", help="Append to an existing conversation.")
def ask(text: str, conversation_id: str | None):
    """Send a single message and print the reply."""
    settings = get_settings()
    store = ConversationStore(build_storage(settings))
    if conversation_id:
        _require_conversation(store, conversation_id)
    client = build_client(settings)

    async def run_ask():
        session = ChatSession(store, client)
        if conversation_id:
            session.open_conversation(conversation_id)
        try:
            await _send_and_print(session, text)
        finally:
            await client.aclose()
        return session.store.get_active()

    active_id = asyncio.run(run_ask())
    if active_id:
        console.print(f"[dim]Conversation: {active_id}[/dim]")


@cli.command(name="list")
def list_conversations():
    """List saved conversations, most recent first."""
    store = ConversationStore(build_storage(get_settings()))
    print_conversations(store.list())


@cli.command()
@click.argument("conversation_id")
def show(conversation_id: str):
    """Print the transcript of one conversation."""
    store = ConversationStore(build_storage(get_settings()))
    conversation = _require_conversation(store, conversation_id)
    console.print(f"[bold]{conversation.title}[/bold] [dim]{conversation.timestamp}[/dim]")
    for message in conversation.messages:
        print_message(message)


@cli.command()
@click.argument("conversation_id")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
def delete(conversation_id: str, yes: bool):
    """Delete a conversation."""
    store = ConversationStore(build_storage(get_settings()))
    _require_conversation(store, conversation_id)
    if not yes and not click.confirm("Are you sure you want to delete this conversation?"):
        console.print("[yellow]Aborted.[/yellow]")
        return
    store.delete(conversation_id)
    console.print(f"[green]✓ Deleted {conversation_id}[/green]")


@cli.command()
@click.argument("conversation_id")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (defaults to <id>.html).",
)
def export(conversation_id: str, output: Path | None):
    """Write a conversation as a standalone HTML page."""
    settings = get_settings()
    storage = build_storage(settings)
    conversation = _require_conversation(ConversationStore(storage), conversation_id)
    page = render_transcript(
        conversation,
        theme=ThemeStore(storage).get(),
        escape_html=settings.render.escape_html,
    )
    target = output or Path(f"{conversation_id}.html")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(page, encoding="utf-8")
    console.print(f"[green]✓ Transcript written to {target}[/green]")


@cli.command()
@click.argument("choice", required=False, type=click.Choice([*THEMES, "toggle"]))
def theme(choice: str | None):
    """Show the current theme, set it, or toggle it."""
    themes = ThemeStore(build_storage(get_settings()))
    if choice is None:
        current = themes.get()
    elif choice == "toggle":
        current = themes.toggle()
    else:
        current = themes.set(choice)
    console.print(f"Theme: [bold]{current}[/bold]")


# ============================================================================
# Entry Point
# ============================================================================


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
