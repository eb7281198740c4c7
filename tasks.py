"""Invoke tasks for CellarBook development."""

import sys
from pathlib import Path

from invoke import task
from invoke.context import Context

LOG_FILE = Path("data/cellarbook.log")
DB_FILE = Path("data/cellarbook.db")


@task
def start(ctx: Context, host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Start the server in the foreground.

    Args:
        ctx: Invoke context
        host: Host to bind to (default: 127.0.0.1)
        port: Port to bind to (default: 8000)
        reload: Enable auto-reload for development
    """
    cmd = f"cellarbook-server start --host {host} --port {port} --foreground"
    if reload:
        cmd += " --reload"

    try:
        ctx.run(cmd, pty=True)
    except KeyboardInterrupt:
        print("\nServer stopped")
        sys.exit(0)


@task(name="start-background")
def start_background(ctx: Context, host: str = "127.0.0.1", port: int = 8000) -> None:
    """Start the server in the background."""
    ctx.run(f"cellarbook-server start --host {host} --port {port}")


@task
def stop(ctx: Context) -> None:
    """Stop the background server."""
    ctx.run("cellarbook-server stop", warn=True)


@task
def status(ctx: Context) -> None:
    """Check whether the server is running."""
    ctx.run("cellarbook-server status", warn=True)


@task
def logs(ctx: Context, follow: bool = False, lines: int = 50) -> None:
    """View the background server log.

    Args:
        ctx: Invoke context
        follow: Follow log output (like tail -f)
        lines: Number of lines to show (default: 50)
    """
    if not LOG_FILE.exists():
        print("No log file found. Server may not have been started in background mode.")
        return

    if follow:
        ctx.run(f"tail -f {LOG_FILE}", pty=True)
    else:
        ctx.run(f"tail -n {lines} {LOG_FILE}")


@task
def test(ctx: Context, verbose: bool = False, coverage: bool = False) -> None:
    """Run the test suite.

    Args:
        ctx: Invoke context
        verbose: Enable verbose output
        coverage: Run with coverage report
    """
    cmd = "pytest"
    if verbose:
        cmd += " -v"
    if coverage:
        cmd += " --cov=cellarbook --cov-report=term-missing"
    ctx.run(cmd, pty=True)


@task(name="import-catalog")
def import_catalog(ctx: Context, path: str, batch_size: int = 1000) -> None:
    """Replace the wine catalog with the rows of a CSV file.

    Args:
        ctx: Invoke context
        path: CSV file to import
        batch_size: Rows per batch (default: 1000)
    """
    ctx.run(f"cellarbook-import-catalog {path} --batch-size {batch_size}", pty=True)


@task
def clean(ctx: Context, all: bool = False) -> None:
    """Clean up temporary files.

    Args:
        ctx: Invoke context
        all: Also remove the SQLite database
    """
    for pattern in ["__pycache__", "*.pyc", "*.pyo", ".pytest_cache"]:
        ctx.run(f"find . -name '{pattern}' -exec rm -rf {{}} + 2>/dev/null || true", warn=True)

    for path in ["build", "dist", "*.egg-info", ".eggs"]:
        ctx.run(f"rm -rf {path} 2>/dev/null || true", warn=True)

    if all and DB_FILE.exists():
        ctx.run("cellarbook-server stop", warn=True, hide=True)
        DB_FILE.unlink()
        print(f"Deleted database: {DB_FILE}")

    print("Cleanup complete")
