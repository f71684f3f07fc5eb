"""CLI entrypoint for LanMap."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Optional

import requests
import typer

app = typer.Typer(name="lanmap", help="LanMap command-line interface")
hosts_app = typer.Typer(name="hosts", help="Manage hosts")
app.add_typer(hosts_app, name="hosts")

DEFAULT_HOST = "http://127.0.0.1:8000"


def _resolve_host(override: Optional[str]) -> str:
    if override:
        return override.rstrip("/")
    env_host = os.environ.get("LANMAP_HOST")
    if env_host:
        return env_host.rstrip("/")
    return DEFAULT_HOST


def _request(method: str, path: str, host: Optional[str] = None, **kwargs) -> requests.Response:
    base = _resolve_host(host)
    url = f"{base}{path}"
    resp = requests.request(method, url, timeout=120, **kwargs)
    if not resp.ok:
        try:
            detail = resp.json()
        except ValueError:
            detail = resp.text
        typer.echo(f"Request failed ({resp.status_code}): {detail}", err=True)
        raise typer.Exit(code=1)
    return resp


def _read_payload(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).expanduser().read_text(encoding="utf-8")


@app.command("import-payload")
def import_payload(
    source: str = typer.Argument(..., help="File holding a LANMAP1 payload, or - for stdin"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Import a scan payload, replacing the host's stored tree."""
    resp = _request("POST", "/import", host=host, json={"payload": _read_payload(source).strip()})
    typer.echo(json.dumps(resp.json(), indent=2))


@app.command()
def tree(
    host_id: str = typer.Argument(..., help="Host identifier"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Print the hierarchical file tree of a host."""
    resp = _request("GET", f"/hosts/{host_id}/tree", host=host)
    typer.echo(json.dumps(resp.json(), indent=2))


@app.command()
def pack(
    host_id: str = typer.Argument(..., help="Host identifier"),
    mode: str = typer.Option("compact", "--mode", help="Snippet mode: compact or full"),
    preset: str = typer.Option("medium", "--preset", help="Chunk preset: small, medium or large"),
    out: Optional[Path] = typer.Option(None, "--out", help="Directory to write one file per part"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Generate a context pack."""
    body = {"hostId": host_id, "snippetMode": mode, "chunkPreset": preset}
    payload = _request("POST", "/context-pack", host=host, json=body).json()
    if out is None:
        typer.echo(json.dumps(payload, indent=2))
        return
    target = out.expanduser()
    target.mkdir(parents=True, exist_ok=True)
    for part in payload["parts"]:
        part_path = target / f"part-{part['index']:02d}.md"
        part_path.write_text(part["content"], encoding="utf-8")
        typer.echo(str(part_path))
    summary = payload["summary"]
    typer.echo(f"{len(payload['parts'])} parts, {summary['truncatedFileCount']} truncated snippets")


@hosts_app.command("list")
def list_hosts(
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """List imported hosts."""
    resp = _request("GET", "/hosts", host=host)
    typer.echo(json.dumps(resp.json(), indent=2))


@hosts_app.command("add")
def add_host(
    label: str = typer.Argument(..., help="Friendly label"),
    address: str = typer.Argument(..., help="Host address"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Register a host before its first import."""
    resp = _request("POST", "/hosts", host=host, json={"label": label, "address": address})
    typer.echo(json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    app()
