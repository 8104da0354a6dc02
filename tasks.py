"""Invoke tasks for Bizdir development and server management."""

import sys
from pathlib import Path

from invoke import task
from invoke.context import Context

LOG_FILE = Path("data/bizdir.log")


@task
def start(ctx: Context, host: str = "0.0.0.0", port: int = 8000, reload: bool = False) -> None:
    """Start the Bizdir API server in the foreground.

    Args:
        ctx: Invoke context
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 8000)
        reload: Enable auto-reload for development
    """
    cmd = f"bizdir-server start --host {host} --port {port} --foreground"
    if reload:
        cmd += " --reload"

    try:
        ctx.run(cmd, pty=True)
    except KeyboardInterrupt:
        print("\nServer stopped")
        sys.exit(0)


@task(name="start-background")
def start_background(ctx: Context, host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the Bizdir API server in the background."""
    ctx.run(f"bizdir-server start --host {host} --port {port}")


@task
def stop(ctx: Context) -> None:
    """Stop the Bizdir API server."""
    ctx.run("bizdir-server stop", warn=True)


@task
def status(ctx: Context, port: int = 8000) -> None:
    """Check the status of the Bizdir API server."""
    ctx.run(f"bizdir-server status --port {port}", warn=True)


@task
def logs(ctx: Context, follow: bool = False, lines: int = 50) -> None:
    """View the server log written in background mode.

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
def test(ctx: Context, verbose: bool = False, mongo: str = "") -> None:
    """Run the test suite.

    Args:
        ctx: Invoke context
        verbose: Enable verbose output
        mongo: MongoDB URL for the database-backed tests (default
            localhost; they are skipped when no server answers)
    """
    cmd = "pytest"
    if verbose:
        cmd += " -v"
    env = {"TEST_MONGODB_URL": mongo} if mongo else None
    ctx.run(cmd, pty=True, env=env)


@task
def clean(ctx: Context, logs: bool = False) -> None:
    """Clean up caches and build artifacts.

    Args:
        ctx: Invoke context
        logs: Also remove the server log and PID file
    """
    for pattern in ["__pycache__", "*.pyc", "*.pyo", ".pytest_cache"]:
        ctx.run(f"find . -name '{pattern}' -exec rm -rf {{}} + 2>/dev/null || true", warn=True)

    for path in ["build", "dist", "*.egg-info", ".eggs"]:
        ctx.run(f"rm -rf {path} 2>/dev/null || true", warn=True)

    if logs:
        for path in (LOG_FILE, Path("data/bizdir.pid")):
            path.unlink(missing_ok=True)

    print("Cleanup complete")
