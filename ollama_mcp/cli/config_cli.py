"""Configuration management CLI for ollama-mcp."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import typer
import yaml

from ollama_mcp.config import CONFIG_FILE, get_settings, load_config
from ollama_mcp.errors import ConfigurationUnavailableError

app = typer.Typer(help="ollama-mcp configuration management")

# Template for initial config.yaml
INIT_CONFIG_TEMPLATE = """# ollama-mcp configuration
# Environment variables (OLLAMA_HOST, OLLAMA_CHAT_MODEL, ...) override these values

mcp:
  name: ollama-mcp

ollama:
  host: "" # defaults to 127.0.0.1:11434, same grammar as OLLAMA_HOST
  context_size: 32000
  code_model: qwen3-coder:30b
  chat_model: gpt-oss:20b
  keep_alive: 1m
  custom_client: false

logging:
  level: INFO
  file: "" # optional log file, stderr is always used
"""


def _flatten_dict(
    d: Dict[str, Any], parent_key: str = "", sep: str = "."
) -> Dict[str, Any]:
    """Flatten a nested dictionary into a single-level dictionary with dot-separated keys."""
    items: List[Tuple[str, Any]] = []
    for k, v in d.items():
        new_key = f"{parent_key}{sep}{k}" if parent_key else k
        if isinstance(v, dict):
            items.extend(_flatten_dict(v, new_key, sep=sep).items())
        else:
            items.append((new_key, v))
    return dict(items)


_MISSING = object()


def _get_config_value(config: Dict[str, Any], key: str) -> Any:
    """Look up a dot-path key such as ``ollama.chat_model``; ``_MISSING`` when absent."""
    current: Any = config
    for part in key.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return _MISSING
    return current


@app.command()
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing file"),
):
    """Create a config.yaml template in the current directory."""
    if CONFIG_FILE.exists() and not force:
        typer.echo(f"[SKIP] Skipping {CONFIG_FILE.name} (already exists)")
        return

    try:
        CONFIG_FILE.write_text(INIT_CONFIG_TEMPLATE)
    except OSError as e:
        typer.echo(f"[ERROR] Failed to write {CONFIG_FILE.name}: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"[OK] Created {CONFIG_FILE.name}")


@app.command()
def validate():
    """Validate the configuration and resolve the backend endpoint."""
    try:
        settings = get_settings()
        config = load_config(settings)
    except ConfigurationUnavailableError as e:
        typer.echo(f"[ERROR] Configuration validation failed: {e.message}", err=True)
        raise typer.Exit(1)
    except ValueError as e:
        typer.echo(f"[ERROR] Configuration validation failed: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("[OK] Configuration is valid!")
    typer.echo(f"    endpoint:   {config.client.base_url if config.client else '-'}")
    typer.echo(f"    code model: {config.code_model}")
    typer.echo(f"    chat model: {config.chat_model}")
    typer.echo(f"    num_ctx:    {config.context_size}")
    typer.echo(f"    keep_alive: {config.keep_alive}")


@app.command("export-env")
def export_env(
    output: Path = typer.Option(".env", "--output", "-o", help="Output file path"),
):
    """Export configuration as .env file."""
    env_vars = get_settings().export_env()
    lines = [f"{key}={value}" for key, value in sorted(env_vars.items())]

    try:
        output.write_text("\n".join(lines) + "\n")
    except OSError as e:
        typer.echo(f"[ERROR] Failed to write to {output}: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"[OK] Exported configuration to {output}")


@app.command()
def show(
    key: Optional[str] = typer.Argument(
        None, help="Specific configuration key to show"
    ),
    format: str = typer.Option(
        "yaml", "--format", "-f", help="Output format (yaml/json/env)"
    ),
):
    """Show current configuration."""
    settings = get_settings()
    config_dict = settings.model_dump()

    if key:
        value = _get_config_value(config_dict, key)
        if value is _MISSING:
            typer.echo(f"[ERROR] Key '{key}' not found", err=True)
            raise typer.Exit(1)
        if isinstance(value, dict):
            value = "\n".join(
                f"{k}={v}" for k, v in _flatten_dict(value, key).items()
            )
        elif value is None:
            value = "null"
        typer.echo(value)
        return

    if format == "json":
        typer.echo(json.dumps(config_dict, indent=2))
    elif format == "env":
        for k, v in settings.export_env().items():
            typer.echo(f"{k}={v}")
    elif format == "yaml":
        typer.echo(yaml.safe_dump(config_dict, default_flow_style=False, sort_keys=False))
    else:
        typer.echo(f"[ERROR] Unknown format '{format}'", err=True)
        raise typer.Exit(2)


if __name__ == "__main__":
    app()
