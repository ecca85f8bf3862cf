"""tixbridge CLI - Command Line Interface.

Main entry point for running the API server and managing user accounts.
"""

import asyncio
from typing import Annotated

import typer
import uvicorn

from tixbridge import __version__
from tixbridge.adapters.persistence import Database, SQLAlchemyUserStore
from tixbridge.application.use_cases import UserAdminUseCase
from tixbridge.domain.exceptions import TixBridgeError
from tixbridge.infrastructure.config.settings import get_settings
from tixbridge.infrastructure.logging.setup import configure_logging, get_logger

app = typer.Typer(
    name="tixbridge",
    help="Ticket marketplace backend-for-frontend",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output"),
    ] = False,
) -> None:
    """tixbridge - paced vendor API proxy and dashboard annotation store."""
    settings = get_settings()
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.environment == "production",
    )


@app.command()
def serve(
    host: Annotated[
        str | None,
        typer.Option("--host", help="Bind address (defaults to settings)"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Bind port (defaults to settings)"),
    ] = None,
) -> None:
    """Run the HTTP and WebSocket server."""
    settings = get_settings()
    log = get_logger(__name__)
    host = host or settings.host
    port = port or settings.port
    log.info("server_starting", host=host, port=port, environment=settings.environment)

    uvicorn.run(
        "tixbridge.interfaces.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        log_config=None,
    )


async def _with_users(action) -> None:
    database = Database(get_settings().database_url)
    try:
        await database.initialize()
        await action(UserAdminUseCase(SQLAlchemyUserStore(database)))
    finally:
        await database.dispose()


@app.command()
def create_user(
    email: Annotated[str, typer.Argument(help="Login email")],
    password: Annotated[
        str,
        typer.Option("--password", prompt=True, hide_input=True, help="Initial password"),
    ],
    admin: Annotated[
        bool,
        typer.Option("--admin", help="Grant admin rights"),
    ] = False,
) -> None:
    """Create a user account."""

    async def action(users: UserAdminUseCase) -> None:
        user = await users.create_user(email, password, is_admin=admin)
        typer.echo(f"Created user {user.email} ({user.id}){' [admin]' if user.is_admin else ''}")

    try:
        asyncio.run(_with_users(action))
    except TixBridgeError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def set_password(
    email: Annotated[str, typer.Argument(help="Login email")],
    password: Annotated[
        str,
        typer.Option("--password", prompt=True, hide_input=True, help="New password"),
    ],
) -> None:
    """Reset the password of an existing user."""

    async def action(users: UserAdminUseCase) -> None:
        await users.change_password_by_email(email, password)
        typer.echo(f"Password updated for {email}")

    try:
        asyncio.run(_with_users(action))
    except TixBridgeError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def version() -> None:
    """Show tixbridge version information."""
    typer.echo(f"tixbridge v{__version__}")
    typer.echo("Ticket marketplace backend-for-frontend")


if __name__ == "__main__":
    app()
