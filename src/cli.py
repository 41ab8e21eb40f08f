"""Click CLI for running the service and generating sites locally."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import click

from src.audit.logger import validate_audit_chain
from src.config import AppConfig
from src.errors import SpokenSiteError
from src.generation.client import GenerationClient


@click.group()
def cli() -> None:
    """SpokenSite website generator."""


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address.")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port.")
def serve(host: str, port: int) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("src.api.app:create_app_from_env", host=host, port=port, factory=True)


@cli.command()
@click.argument("transcript_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--business-name", default=None, help="Business name hint for the model.")
@click.option(
    "--out", "out_dir", default="sites", show_default=True,
    type=click.Path(file_okay=False, path_type=Path), help="Directory for the generated files.",
)
def generate(transcript_file: Path, business_name: str | None, out_dir: Path) -> None:
    """Generate the three site variants from a transcript file."""
    transcript = transcript_file.read_text()
    if not transcript.strip():
        raise click.ClickException("Transcript file is empty")

    client = GenerationClient(AppConfig.from_env())
    try:
        result = asyncio.run(client.generate(transcript, business_name))
    except SpokenSiteError as exc:
        raise click.ClickException(str(exc)) from exc

    out_dir.mkdir(parents=True, exist_ok=True)
    for variant, html in result.websites().items():
        (out_dir / f"{variant}.html").write_text(html)
    (out_dir / "business_info.json").write_text(json.dumps(result.business_info, indent=2))
    click.echo(json.dumps({"businessInfo": result.business_info, "out": str(out_dir)}, indent=2))


@cli.group("audit")
def audit_group() -> None:
    """Inspect the audit trail."""


@audit_group.command("verify")
@click.argument("log_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def audit_verify(log_path: Path) -> None:
    """Validate the hash chain of an audit log."""
    result = validate_audit_chain(log_path)
    click.echo(json.dumps({
        "valid": result.valid,
        "entries": result.entries,
        "broken_at_line": result.broken_at_line,
    }))
    if not result.valid:
        raise SystemExit(1)
