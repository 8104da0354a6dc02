"""Bizdir server control script.

Usage:
    bizdir-server start [--port PORT] [--host HOST] [--reload] [--foreground]
    bizdir-server stop
    bizdir-server restart [--port PORT] [--host HOST]
    bizdir-server status [--port PORT]
"""

import argparse
import json
import os
import signal
import subprocess
import sys
import time
import urllib.error
import urllib.request
from pathlib import Path

from bizdir.config import settings

APP_TARGET = "bizdir.main:app"
STOP_TIMEOUT_SECONDS = 5.0


def get_data_dir() -> Path:
    """Directory holding the PID and log files."""
    return Path(settings.data_dir)


def get_pid_file() -> Path:
    return get_data_dir() / "bizdir.pid"


def get_log_file() -> Path:
    return get_data_dir() / "bizdir.log"


def read_pid() -> int | None:
    """Return the PID of the running server, clearing a stale PID file."""
    pid_file = get_pid_file()
    if not pid_file.exists():
        return None

    try:
        pid = int(pid_file.read_text().strip())
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        pid_file.unlink(missing_ok=True)
        return None


def build_command(host: str, port: int, reload: bool = False) -> list[str]:
    """uvicorn command line serving the API."""
    cmd = [
        sys.executable, "-m", "uvicorn",
        APP_TARGET,
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        cmd.append("--reload")
    return cmd


def start_server(host: str, port: int, reload: bool = False, foreground: bool = False) -> bool:
    """Start the server in the background, or in the foreground if asked.

    Returns:
        True if the server started
    """
    pid = read_pid()
    if pid:
        print(f"Server is already running (PID: {pid})")
        return False

    get_data_dir().mkdir(parents=True, exist_ok=True)
    cmd = build_command(host, port, reload)

    print(f"Starting Bizdir server on http://{host}:{port}")

    if foreground:
        print("Press Ctrl+C to stop the server")
        try:
            subprocess.run(cmd)
        except KeyboardInterrupt:
            print("\nServer stopped")
        return True

    log_file = get_log_file()
    with open(log_file, "w") as log:
        process = subprocess.Popen(
            cmd,
            stdout=log,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        )

    # Give uvicorn a moment to fail on bad arguments or a busy port
    time.sleep(1)
    if process.poll() is not None:
        print(f"Failed to start server. See {log_file} for details.")
        return False

    get_pid_file().write_text(str(process.pid))
    print(f"Server started with PID: {process.pid}")
    print(f"Logs available at: {log_file}")
    return True


def stop_server() -> bool:
    """Stop the server: SIGTERM first, SIGKILL after a grace period.

    Returns:
        True if a server was stopped
    """
    pid = read_pid()
    if not pid:
        print("Server is not running")
        return False

    print(f"Stopping server (PID: {pid})...")
    try:
        os.kill(pid, signal.SIGTERM)

        deadline = time.monotonic() + STOP_TIMEOUT_SECONDS
        while time.monotonic() < deadline:
            time.sleep(0.5)
            try:
                os.kill(pid, 0)
            except ProcessLookupError:
                break
        else:
            print("Server didn't stop gracefully, forcing...")
            os.kill(pid, signal.SIGKILL)
    except ProcessLookupError:
        print("Server was not running")
        get_pid_file().unlink(missing_ok=True)
        return False
    except PermissionError:
        print(f"Permission denied to stop process {pid}")
        return False

    get_pid_file().unlink(missing_ok=True)
    print("Server stopped")
    return True


def fetch_health(port: int) -> dict | None:
    """Query the local /health endpoint."""
    try:
        with urllib.request.urlopen(f"http://127.0.0.1:{port}/health", timeout=2) as response:
            return json.loads(response.read().decode())
    except (urllib.error.URLError, OSError, ValueError):
        return None


def server_status(port: int) -> bool:
    """Print the server status. Returns True if it is running."""
    pid = read_pid()
    if not pid:
        print("Bizdir server is not running")
        return False

    print(f"Bizdir server is running (PID: {pid})")
    health = fetch_health(port)
    if health is None:
        print("  (Could not fetch health status)")
    else:
        print(f"  Status: {health.get('status', 'unknown')}")
        print(f"  Version: {health.get('version', 'unknown')}")
        print(f"  Storage: {health.get('storage_mode', 'unknown')}")
    return True


def _add_bind_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=settings.port,
        help=f"Port to bind to (default: {settings.port})",
    )
    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"Host to bind to (default: {settings.host})",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bizdir server control script",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    start_parser = subparsers.add_parser("start", help="Start the server")
    _add_bind_arguments(start_parser)
    start_parser.add_argument(
        "--reload", "-r",
        action="store_true",
        help="Enable auto-reload for development",
    )
    start_parser.add_argument(
        "--foreground", "-f",
        action="store_true",
        help="Run in foreground (blocking)",
    )

    subparsers.add_parser("stop", help="Stop the server")

    restart_parser = subparsers.add_parser("restart", help="Restart the server")
    _add_bind_arguments(restart_parser)

    status_parser = subparsers.add_parser("status", help="Check server status")
    status_parser.add_argument(
        "--port", "-p",
        type=int,
        default=settings.port,
        help="Port the server listens on",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "start":
            ok = start_server(args.host, args.port, reload=args.reload, foreground=args.foreground)
        elif args.command == "stop":
            ok = stop_server()
        elif args.command == "restart":
            print("Restarting Bizdir server...")
            stop_server()
            time.sleep(1)
            ok = start_server(args.host, args.port)
        else:
            ok = server_status(args.port)
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
