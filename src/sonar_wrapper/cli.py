"""Command-line interface for the SonarQube environment wrapper."""

from __future__ import annotations

import json
import sys
from pathlib import Path  # noqa: TC003

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .core import build_runtime_context, describe, execute, load_config
from .listener import BuildListener
from .providers import load_base_env
from .types import RuntimeContext
from .wrapper import SonarBuildWrapper

app = typer.Typer(help="Prepare SonarQube scanner environment for build steps")
console = Console()


@app.command()
def run(
    config_file: Path = typer.Argument(..., help="Path to YAML wrapper configuration"),
    command: list[str] = typer.Argument(..., help="Build command to run (after --)"),
    installation: str | None = typer.Option(None, "--installation", "-i", help="SonarQube installation name"),
    env_file: list[Path] = typer.Option([], "--env-file", help="Dotenv file overlaid on the host environment"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Enable quiet mode (minimal output)"),
) -> None:
    """Run a build command inside the SonarQube scanner environment."""
    try:
        if verbose and quiet:
            console.print("[red]Error: --verbose and --quiet cannot be used together[/red]")
            sys.exit(1)

        config = load_config(config_file)
        wrapper = SonarBuildWrapper(installation, config)

        if not wrapper.is_applicable():
            console.print("[red]Error: the SonarQube build wrapper is disabled in this configuration[/red]")
            sys.exit(1)

        sys.stdout.flush()
        sink = sys.stdout.buffer

        # Wrapper messages go through the same masking as the build output
        log = wrapper.decorate_logger(sink)
        listener = BuildListener(log)
        environment = wrapper.set_up(listener)
        if environment is None:
            log.close()
            sys.exit(1)

        env = load_base_env(env_files=env_file)
        environment.build_env_vars(env)
        log.close()

        context = RuntimeContext(
            installation_name=environment.installation.name or "",
            env=env,
            secrets=environment.secrets,
        )

        if verbose:
            console.print(f"[blue]Installation: {context.installation_name}[/blue]")
            console.print(f"Command: {' '.join(command)}")
            sys.stdout.flush()

        result = execute(context, command, sink)

        if not quiet:
            console.print("\n[bold]Execution completed[/bold]")
            console.print(f"Exit code: {result.exit_code}")
            if verbose:
                console.print(f"Duration: {result.duration_s:.2f}s")

        if result.exit_code != 0:
            sys.exit(result.exit_code)

    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


@app.command()
def env(
    config_file: Path = typer.Argument(..., help="Path to YAML wrapper configuration"),
    installation: str | None = typer.Option(None, "--installation", "-i", help="SonarQube installation name"),
    env_file: list[Path] = typer.Option([], "--env-file", help="Dotenv file overlaid on the host environment"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
) -> None:
    """Show the variables that would be injected, secrets masked."""
    try:
        config = load_config(config_file)
        context = build_runtime_context(config, installation, env_files=env_file)
        summary = describe(context)

        if json_output:
            console.print_json(json.dumps(summary))
            return

        table = Table(title=f"SonarQube environment ({summary['installation']})")
        table.add_column("Variable", style="cyan")
        table.add_column("Value", style="green")
        for name, value in summary["variables"].items():
            table.add_row(name, value)
        console.print(table)

    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)


@app.command()
def validate(
    config_file: Path = typer.Argument(..., help="Path to YAML wrapper configuration"),
    strict: bool = typer.Option(False, "--strict", help="Enable strict validation"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Enable quiet mode (minimal output)"),
) -> None:
    """Validate a wrapper configuration."""
    try:
        if verbose and quiet:
            console.print("[red]Error: --verbose and --quiet cannot be used together[/red]")
            sys.exit(1)

        # Loading validates the schema
        config = load_config(config_file)

        if verbose and not quiet:
            console.print(f"[blue]Loaded configuration from {config_file}[/blue]")
            console.print(f"Installations: {len(config.installations)}")
            console.print(f"Build wrapper enabled: {config.build_wrapper_enabled}")

        from .validation import semantic_validate
        semantic_errors = semantic_validate(config, strict=strict)

        if semantic_errors:
            console.print("[red]Semantic validation failed:[/red]")
            for error in semantic_errors:
                console.print(f"  [red]• {error}[/red]")
            sys.exit(1)

        if not quiet:
            if strict:
                console.print(Panel("[green]✓ Configuration is valid (strict mode)[/green]"))
            else:
                console.print(Panel("[green]✓ Configuration is valid[/green]"))

    except Exception as e:
        console.print(f"[red]Validation error: {escape(str(e))}[/red]")
        sys.exit(1)


@app.command()
def print_schema() -> None:
    """Print the JSON schema for wrapper configurations."""
    from .models import GlobalConfig

    schema = GlobalConfig.model_json_schema()
    console.print(json.dumps(schema, indent=2))


if __name__ == "__main__":
    app()
