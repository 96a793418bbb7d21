import asyncio
import logging
from typing import Optional

import typer
import uvicorn
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from coffee_reporting.core.config import Settings
from coffee_reporting.core.database import MongoConnection
from coffee_reporting.core.logging_config import configure_logging
from coffee_reporting.main import create_app

logger = logging.getLogger(__name__)

app = typer.Typer(name="coffee-reporting", help="Coffee sales reporting service.")


def _load_settings(**overrides) -> Settings:
    try:
        return Settings.from_env(**overrides)
    except ValidationError as e:
        for error in e.errors():
            typer.secho(f"Configuration error: {error['msg']}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command("serve")
def serve_command(
    verbose: bool = typer.Option(False, "--verbose", help="Verbose logging"),
    addr: Optional[str] = typer.Option(None, "--addr", help="Address to listen on [default: :5000]"),
    mongo: Optional[str] = typer.Option(None, "--mongo", help="Connection string for the MongoDB server [default: mongodb://localhost:27017]"),
    tls: bool = typer.Option(False, "--tls", help="Enable TLS"),
    cert: Optional[str] = typer.Option(None, "--cert", help="Filename for certificate file (e.g. cert.pem)"),
    certkey: Optional[str] = typer.Option(None, "--certkey", help="Filename for certificate private key file (e.g. key.pem)"),
):
    """Runs the HTTP(S) reporting server."""
    settings = _load_settings(
        verbose=verbose or None, listen_addr=addr, mongo_uri=mongo, tls=tls or None, cert_file=cert, cert_key_file=certkey,
    )
    try:
        host, port = settings.bind()
    except ValueError as e:
        typer.secho(f"Configuration error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    certfile, keyfile = settings.certificate_files()
    configure_logging(settings.verbose)
    logger.info("Starting %s server on %s", "HTTPS" if settings.tls else "HTTP", settings.listen_addr)
    uvicorn.run(
        create_app(settings),
        host=host,
        port=port,
        ssl_certfile=certfile,
        ssl_keyfile=keyfile,
        log_level="debug" if settings.verbose else "info",
    )
    logger.info("HTTP server shutdown")


@app.command("check-db")
def check_db_command(
    mongo: Optional[str] = typer.Option(None, "--mongo", help="Connection string for the MongoDB server"),
):
    """Checks the MongoDB connection and counts the report collections."""
    settings = _load_settings(mongo_uri=mongo)
    asyncio.run(_check_db(settings))


async def _check_db(settings: Settings):
    connection = MongoConnection.open(
        settings.mongo_uri,
        serverSelectionTimeoutMS=int(settings.db_timeout_seconds * 1000),
    )
    database = connection.database(settings.database_name)
    if database is None:
        typer.secho("Error: no MongoDB connection could be created.", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    try:
        for name in (settings.orders_collection, settings.accounts_collection):
            count = await database[name].count_documents({})
            typer.echo(f"{settings.database_name}.{name}: {count} document(s)")
    except PyMongoError as e:
        typer.secho(f"Error querying MongoDB: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    finally:
        await connection.close()
    typer.secho("Successfully connected to the database.", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
