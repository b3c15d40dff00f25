import json
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv, set_key

from .config import AuthSettings, BoltSettings, load_runtime_settings
from .domain.services import QueryFacade
from .exceptions import BoltWrapperError
from .logging_setup import configure_logging

app = typer.Typer(add_completion=False)


def _test_connection(settings: BoltSettings) -> bool:
    errors: list[BoltWrapperError] = []
    with QueryFacade.from_settings(settings, error_hook=errors.append) as db:
        value = db.query_first_field("RETURN 1 AS ok")
    for error in errors:
        typer.echo(f"Connection failed: {error.message} {error.code or ''}", err=True)
    return not errors and value == 1


@app.command()
def setup(env_file: Path = typer.Option(Path(".env"), help="File to write")) -> None:
    """Interactive setup wizard storing connection details in a .env file."""
    if env_file.exists():
        if typer.confirm(f"Import existing {env_file} values?", default=True):
            load_dotenv(env_file)
            typer.echo(f"Loaded values from {env_file}")
    current = BoltSettings()
    host = typer.prompt("Bolt host", default=current.host)
    port = typer.prompt("Bolt port", default=current.port, type=int)
    user = typer.prompt("User", default=current.auth.principal or "neo4j")
    password = typer.prompt(
        "Password",
        default=current.auth.credentials or "",
        hide_input=True,
    )

    settings = BoltSettings(
        host=host,
        port=port,
        timeout=current.timeout,
        protocol_version=current.protocol_version,
        auth=AuthSettings(scheme="basic", principal=user, credentials=password),
    )
    typer.echo("Testing connection...")
    if not _test_connection(settings):
        typer.secho("Failed to connect with provided details", fg="red")
        raise typer.Exit(1)
    typer.secho("Connected successfully!", fg="green")

    env_file.touch(mode=0o600, exist_ok=True)
    set_key(str(env_file), "NEO4J_HOST", host)
    set_key(str(env_file), "NEO4J_PORT", str(port))
    set_key(str(env_file), "NEO4J_AUTH__SCHEME", "basic")
    set_key(str(env_file), "NEO4J_AUTH__PRINCIPAL", user)
    set_key(str(env_file), "NEO4J_AUTH__CREDENTIALS", password)
    env_file.chmod(0o600)
    typer.secho(f"Credentials saved to {env_file}", fg="green")


@app.command()
def query(
    text: str = typer.Argument(..., help="Cypher statement to run"),
    params: str = typer.Option("{}", help="Query parameters as a JSON object"),
    config: Optional[Path] = typer.Option(None, help="YAML settings file"),
) -> None:
    """Run a statement and print each row as a JSON line."""
    try:
        parameters = json.loads(params)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON: {exc}", param_hint="--params")
    if not isinstance(parameters, dict):
        raise typer.BadParameter("Parameters must be a JSON object", param_hint="--params")

    runtime = load_runtime_settings(config)
    configure_logging(runtime.logging)

    errors: list[BoltWrapperError] = []
    with QueryFacade.from_settings(runtime.bolt, error_hook=errors.append) as db:
        result = db.query_result(text, parameters)
    if errors:
        for error in errors:
            typer.secho(f"Database error: {error.message} {error.code or ''}", fg="red", err=True)
        raise typer.Exit(1)

    for row in result.rows:
        typer.echo(json.dumps(row, default=str))
    counters = {key: value for key, value in result.statistics.items() if value}
    typer.echo(f"-- {json.dumps(counters)}", err=True)


if __name__ == "__main__":
    app()
