"""CLI entrypoint for Clone Check."""

from __future__ import annotations

import json
import os
from typing import Optional

import requests
import typer

app = typer.Typer(name="clone-check", help="Clone Check command-line interface")
reports_app = typer.Typer(name="reports")
app.add_typer(reports_app, name="reports")

DEFAULT_HOST = "http://127.0.0.1:5180"


def _resolve_host(override: Optional[str]) -> str:
    if override:
        return override.rstrip('/')
    env_host = os.environ.get("CLONECHECK_HOST")
    if env_host:
        return env_host.rstrip('/')
    return DEFAULT_HOST


def _request(method: str, path: str, host: Optional[str] = None, **kwargs) -> requests.Response:
    base = _resolve_host(host)
    url = f"{base}{path}"
    resp = requests.request(method, url, timeout=60, **kwargs)
    if not resp.ok:
        try:
            detail = resp.json()
        except ValueError:
            detail = resp.text
        typer.echo(f"Request failed ({resp.status_code}): {detail}", err=True)
        raise typer.Exit(code=1)
    return resp


@app.command()
def check(
    course_id: int = typer.Argument(..., help="Course to check for clones"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Enqueue a clone check for every submission of a course."""
    resp = _request("POST", "/check", host=host, json={"course_id": course_id})
    typer.echo(json.dumps(resp.json(), indent=2))


@app.command()
def status(
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Show queue and index state."""
    resp = _request("GET", "/status", host=host)
    typer.echo(json.dumps(resp.json(), indent=2))


@reports_app.command("list")
def list_reports(
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """List submissions that have a clone report."""
    resp = _request("GET", "/reports", host=host)
    typer.echo(json.dumps(resp.json(), indent=2))


@reports_app.command("show")
def show_report(
    submission_id: int = typer.Argument(..., help="Submission identifier"),
    host: Optional[str] = typer.Option(None, "--host", help="Override backend host"),
) -> None:
    """Print the clone report of a submission."""
    resp = _request("GET", f"/reports/{submission_id}", host=host)
    typer.echo(json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    app()
