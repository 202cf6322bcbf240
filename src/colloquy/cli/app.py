"""Main CLI application using Typer."""
import asyncio

import httpx
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.table import Table

from ..chat import ChatSession, Conversation, ConversationNotFoundError, MessageRole, load_attachment
from ..config import CHAT_MESSAGE_MAX_PREVIEW, credentials_path, setup_logging
from ..llm import (
    ChatError,
    ChatMessage,
    ConfigurationError,
    CredentialStore,
    Provider,
    describe_model,
    get_provider_info,
    list_providers,
)
from .providers import get_credentials, get_service, get_session, get_store

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="colloquy",
    help="Chat with hosted LLM providers from the terminal",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

EXIT_WORDS = ("exit", "quit", "q")


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "warning",
        "--log-level",
        "-l",
        help="Log level: debug, info, warning, or error"
    )
):
    """Chat with hosted LLM providers from the terminal."""
    setup_logging(log_level)


def _resolve_provider(name: str) -> Provider:
    try:
        return get_provider_info(name).provider
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


async def _resolve_conversation(session: ChatSession, id_prefix: str) -> Conversation:
    """Find a conversation by full id or unique id prefix."""
    matches = [c for c in await session.conversations() if c.id.startswith(id_prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise ConversationNotFoundError(id_prefix)
    console.print(f"[red]Error: '{id_prefix}' matches {len(matches)} conversations[/red]")
    raise typer.Exit(code=1)


def _print_reply(content: str) -> None:
    console.print("[bold green]Assistant:[/bold green]")
    console.print(Markdown(content))
    console.print()


@app.command()
def providers():
    """List supported providers and whether an API key is configured."""
    credentials = get_credentials(console)

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Provider", style="cyan")
    table.add_column("Name")
    table.add_column("Default model", style="yellow")
    table.add_column("API key")

    for info in list_providers():
        key_status = (
            "[green]SET[/green]" if credentials.is_configured(info.provider)
            else "[yellow]NOT SET[/yellow]"
        )
        table.add_row(info.provider.value, info.display_name, info.default_model, key_status)

    console.print(table)


@app.command()
def models(
    provider: str = typer.Argument(..., help="Provider name, e.g. openai"),
):
    """List the selectable models of a provider."""
    info = get_provider_info(_resolve_provider(provider))

    table = Table(show_header=True, header_style="bold cyan", title=info.display_name)
    table.add_column("Model", style="cyan")
    table.add_column("Default", width=7)
    table.add_column("Description", style="dim")

    for model in info.available_models:
        default = "*" if model == info.default_model else ""
        table.add_row(model, default, describe_model(model) or "")

    console.print(table)


@app.command()
def configure(
    provider: str = typer.Argument(..., help="Provider name, e.g. anthropic"),
    api_key: str = typer.Option(
        None,
        "--api-key",
        "-k",
        help="API key (prompted for when omitted)"
    ),
):
    """Store an API key for a provider in the local credential file."""
    info = get_provider_info(_resolve_provider(provider))
    if api_key is None:
        api_key = typer.prompt(f"{info.display_name} API key", hide_input=True)

    path = credentials_path()
    try:
        stored = CredentialStore.from_file(path)
    except ConfigurationError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    stored.with_key(info.provider, api_key.strip()).save(path)
    console.print(f"[green]Saved {info.display_name} API key to {path}[/green]")


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Message to send"),
    provider: str = typer.Option(
        "openai",
        "--provider",
        "-p",
        help="Provider to send to"
    ),
    model: str = typer.Option(
        None,
        "--model",
        "-m",
        help="Model id (default: the provider's default model)"
    ),
    system: str = typer.Option(
        None,
        "--system",
        "-s",
        help="Optional system message"
    ),
):
    """Send a single message without saving a conversation."""
    info = get_provider_info(_resolve_provider(provider))

    async def _ask():
        service = get_service(console)
        try:
            messages = []
            if system:
                messages.append(ChatMessage(role="system", content=system))
            messages.append(ChatMessage(role="user", content=prompt))

            reply = await service.send(messages, info.provider, model or info.default_model)
            _print_reply(reply)
        except (ChatError, httpx.HTTPError) as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
        finally:
            await service.close()

    asyncio.run(_ask())


@app.command()
def chat(
    provider: str = typer.Option(
        None,
        "--provider",
        "-p",
        help="Provider for a new conversation (default: first configured provider)"
    ),
    model: str = typer.Option(
        None,
        "--model",
        "-m",
        help="Model id for a new conversation"
    ),
    resume: str = typer.Option(
        None,
        "--resume",
        "-r",
        help="Id (or id prefix) of a conversation to continue"
    ),
    ephemeral: bool = typer.Option(
        False,
        "--ephemeral",
        "-e",
        help="Keep the conversation in memory only"
    ),
):
    """Interactive chat, saved to the local conversation database."""
    async def _chat():
        store = get_store(persistent=not ephemeral)
        session = get_session(store, console)
        await store.connect()

        try:
            if resume:
                conversation = await _resolve_conversation(session, resume)
                for message in await session.history(conversation.id):
                    if message.role is MessageRole.USER:
                        console.print(f"[bold yellow]You:[/bold yellow] {escape(message.content)}")
                    else:
                        _print_reply(message.content)
            else:
                if provider:
                    selected = _resolve_provider(provider)
                else:
                    configured = session.service.credentials.configured_providers()
                    if not configured:
                        console.print("[red]Error: No API key configured. Run: colloquy configure <provider>[/red]")
                        raise typer.Exit(code=1)
                    selected = configured[0]
                conversation = await session.start_conversation(selected, model)

            console.print(
                f"[bold cyan]{escape(conversation.title)}[/bold cyan] "
                f"[dim]({conversation.provider.value}/{conversation.model}, id {conversation.id[:8]})[/dim]"
            )
            console.print(
                "[dim]Type 'exit', 'quit', or 'q' to leave. "
                "Commands: /image <path>, /model <provider> \\[model], /clear[/dim]\n"
            )

            pending_image: bytes | None = None
            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                text = user_input.strip()
                if not text and pending_image is None:
                    continue

                if text.lower() in EXIT_WORDS:
                    console.print("[dim]Goodbye![/dim]")
                    break

                command, _, argument = text.partition(" ")
                argument = argument.strip()

                if command == "/image":
                    if not argument:
                        console.print("[yellow]Usage: /image <path>[/yellow]")
                        continue
                    pending_image = load_attachment(argument)
                    if pending_image is None:
                        console.print("[yellow]Attachment ignored[/yellow]")
                    else:
                        console.print(f"[dim]Attached image ({len(pending_image)} bytes)[/dim]")
                    continue

                if command == "/model":
                    parts = argument.split()
                    if not parts:
                        console.print("[yellow]Usage: /model <provider> \\[model][/yellow]")
                        continue
                    try:
                        conversation = await session.switch_model(
                            conversation.id, parts[0], parts[1] if len(parts) > 1 else None
                        )
                        console.print(f"[dim]Now using {conversation.provider.value}/{conversation.model}[/dim]")
                    except ValueError as e:
                        console.print(f"[red]Error: {escape(str(e))}[/red]")
                    continue

                if command == "/clear":
                    removed = await session.clear(conversation.id)
                    console.print(f"[dim]Cleared {removed} messages[/dim]")
                    continue

                try:
                    with console.status("[dim]Thinking...[/dim]"):
                        reply = await session.send(conversation.id, text, pending_image)
                    _print_reply(reply.content)
                except (ChatError, httpx.HTTPError) as e:
                    console.print(f"[red]Error: {escape(str(e))}[/red]\n")
                finally:
                    pending_image = None

        except (ConversationNotFoundError, ValueError) as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
        finally:
            await session.service.close()
            await store.disconnect()

    asyncio.run(_chat())


@app.command()
def conversations():
    """List saved conversations, most recently updated first."""
    async def _conversations():
        store = get_store()
        try:
            await store.connect()
            items = await store.list_conversations()

            if not items:
                console.print("[yellow]No conversations yet[/yellow]")
                return

            table = Table(show_header=True, header_style="bold cyan")
            table.add_column("Id", style="dim", width=8)
            table.add_column("Title", style="cyan")
            table.add_column("Model", style="yellow")
            table.add_column("Updated", style="green")

            for conversation in items:
                table.add_row(
                    conversation.id[:8],
                    escape(conversation.title),
                    f"{conversation.provider.value}/{conversation.model}",
                    conversation.updated_at.strftime("%Y-%m-%d %H:%M"),
                )

            console.print(table)
        finally:
            await store.disconnect()

    asyncio.run(_conversations())


@app.command()
def history(
    conversation_id: str = typer.Argument(..., help="Conversation id or id prefix"),
    full: bool = typer.Option(
        False,
        "--full",
        "-f",
        help="Show complete message text"
    ),
):
    """Show the messages of a saved conversation."""
    async def _history():
        store = get_store()
        try:
            await store.connect()
            session = get_session(store, console)
            try:
                conversation = await _resolve_conversation(session, conversation_id)
                messages = await session.history(conversation.id)
            finally:
                await session.service.close()

            console.print(f"[bold cyan]{escape(conversation.title)}[/bold cyan]\n")
            for message in messages:
                content = escape(message.content)
                if not full and len(content) > CHAT_MESSAGE_MAX_PREVIEW:
                    content = content[:CHAT_MESSAGE_MAX_PREVIEW] + "..."
                if message.image_data:
                    content += " [dim]\\[image][/dim]"
                stamp = message.timestamp.strftime("%H:%M:%S")
                console.print(f"[dim]{stamp}[/dim] [bold]{message.role.value}:[/bold] {content}")

        except ConversationNotFoundError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

    asyncio.run(_history())


@app.command()
def rename(
    conversation_id: str = typer.Argument(..., help="Conversation id or id prefix"),
    title: str = typer.Argument(..., help="New title"),
):
    """Rename a saved conversation."""
    async def _rename():
        store = get_store()
        try:
            await store.connect()
            session = get_session(store, console)
            try:
                conversation = await _resolve_conversation(session, conversation_id)
                conversation = await session.rename(conversation.id, title)
            finally:
                await session.service.close()
            console.print(f"[green]Renamed to '{escape(conversation.title)}'[/green]")

        except (ConversationNotFoundError, ValueError) as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

    asyncio.run(_rename())


@app.command()
def clear(
    conversation_id: str = typer.Argument(..., help="Conversation id or id prefix"),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    ),
):
    """Delete all messages of a conversation, keeping the conversation."""
    async def _clear():
        store = get_store()
        try:
            await store.connect()
            session = get_session(store, console)
            try:
                conversation = await _resolve_conversation(session, conversation_id)
                if not yes:
                    confirm = typer.confirm(f"Clear all messages of '{conversation.title}'?")
                    if not confirm:
                        console.print("[dim]Aborted.[/dim]")
                        return
                removed = await session.clear(conversation.id)
            finally:
                await session.service.close()
            console.print(f"[green]Deleted {removed} messages.[/green]")

        except ConversationNotFoundError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

    asyncio.run(_clear())


@app.command()
def delete(
    conversation_id: str = typer.Argument(..., help="Conversation id or id prefix"),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    ),
):
    """Delete a conversation and its messages."""
    async def _delete():
        store = get_store()
        try:
            await store.connect()
            session = get_session(store, console)
            try:
                conversation = await _resolve_conversation(session, conversation_id)
                if not yes:
                    console.print("[yellow]WARNING: This will delete the conversation and its messages![/yellow]")
                    confirm = typer.confirm(f"Delete '{conversation.title}'?")
                    if not confirm:
                        console.print("[dim]Aborted.[/dim]")
                        return
                await session.delete(conversation.id)
            finally:
                await session.service.close()
            console.print(f"[green]Deleted '{escape(conversation.title)}'.[/green]")

        except ConversationNotFoundError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)
        finally:
            await store.disconnect()

    asyncio.run(_delete())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
