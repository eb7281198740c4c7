"""CellarBook server control script.

Usage:
    cellarbook-server start [--host HOST] [--port PORT] [--reload] [--foreground]
    cellarbook-server stop
    cellarbook-server restart [--host HOST] [--port PORT]
    cellarbook-server status

Host, port and log level default to the values in config.toml.
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

from cellarbook.config import settings

DATA_DIR = Path("data")
PID_FILE = DATA_DIR / "cellarbook.pid"
LOG_FILE = DATA_DIR / "cellarbook.log"
APP_PATH = "cellarbook.main:app"


def read_pid() -> int | None:
    """Return the PID recorded in the PID file if that process is alive."""
    if not PID_FILE.exists():
        return None

    try:
        pid = int(PID_FILE.read_text().strip())
        os.kill(pid, 0)
        return pid
    except (ValueError, ProcessLookupError, PermissionError):
        # Stale PID file
        PID_FILE.unlink(missing_ok=True)
        return None


def find_running_server() -> int | None:
    """Look for a uvicorn process serving CellarBook started by other means."""
    try:
        result = subprocess.run(
            ["pgrep", "-f", f"uvicorn {APP_PATH}"],
            capture_output=True,
            text=True,
        )
    except FileNotFoundError:
        # pgrep not installed
        return None
    if result.returncode == 0 and result.stdout.strip():
        return int(result.stdout.split()[0])
    return None


def build_command(host: str, port: int, reload: bool = False) -> list[str]:
    """Assemble the uvicorn command line."""
    cmd = [
        sys.executable, "-m", "uvicorn",
        APP_PATH,
        "--host", host,
        "--port", str(port),
        "--log-level", settings.log_level.lower(),
    ]
    if reload:
        cmd.append("--reload")
    return cmd


def start_server(host: str, port: int, reload: bool = False, foreground: bool = False) -> bool:
    """Start the server.

    Returns:
        True if the server started (or ran to completion in the foreground).
    """
    pid = read_pid() or find_running_server()
    if pid:
        print(f"Server is already running (PID: {pid})")
        return False

    DATA_DIR.mkdir(parents=True, exist_ok=True)
    cmd = build_command(host, port, reload=reload)
    print(f"Starting {settings.app_name} on http://{host}:{port}")

    if foreground:
        print("Press Ctrl+C to stop the server")
        try:
            subprocess.run(cmd)
        except KeyboardInterrupt:
            print("\nServer stopped")
        return True

    with open(LOG_FILE, "w") as log:
        process = subprocess.Popen(
            cmd,
            stdout=log,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        )

    time.sleep(1)
    if process.poll() is not None:
        print(f"Failed to start server. See {LOG_FILE} for details.")
        return False

    PID_FILE.write_text(str(process.pid))
    print(f"Server started with PID: {process.pid}")
    print(f"Logs available at: {LOG_FILE}")
    return True


def stop_server() -> bool:
    """Stop the server with SIGTERM, escalating to SIGKILL after five seconds.

    Returns:
        True if a running server was stopped.
    """
    pid = read_pid() or find_running_server()
    if not pid:
        print("Server is not running")
        return False

    print(f"Stopping server (PID: {pid})...")
    try:
        os.kill(pid, signal.SIGTERM)
        for _ in range(10):
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
        PID_FILE.unlink(missing_ok=True)
        return False
    except PermissionError:
        print(f"Permission denied to stop process {pid}")
        return False

    PID_FILE.unlink(missing_ok=True)
    print("Server stopped")
    return True


def restart_server(host: str, port: int) -> bool:
    print(f"Restarting {settings.app_name}...")
    stop_server()
    time.sleep(1)
    return start_server(host, port)


def fetch_health(host: str, port: int) -> dict | None:
    """Query the /health endpoint, returning None when it cannot be reached."""
    if host in ("0.0.0.0", "::"):
        host = "localhost"
    try:
        with urllib.request.urlopen(f"http://{host}:{port}/health", timeout=2) as response:
            return json.loads(response.read().decode())
    except (urllib.error.URLError, OSError, ValueError):
        return None


def server_status(host: str, port: int) -> bool:
    """Print whether the server is running and, if so, its health.

    Returns:
        True if the server is running.
    """
    pid = read_pid() or find_running_server()
    if not pid:
        print(f"{settings.app_name} server is not running")
        return False

    print(f"{settings.app_name} server is running (PID: {pid})")
    health = fetch_health(host, port)
    if health is None:
        print("  (Could not fetch health status)")
    else:
        print(f"  Status: {health.get('status', 'unknown')}")
        print(f"  Version: {health.get('version', 'unknown')}")
    return True


def _add_bind_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"Host to bind to (default: {settings.host})",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=settings.port,
        help=f"Port to bind to (default: {settings.port})",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CellarBook server control script",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s start                  Start server in the background
  %(prog)s start --port 8080      Start server on port 8080
  %(prog)s start --reload -f      Start in the foreground with auto-reload
  %(prog)s stop                   Stop the server
  %(prog)s restart                Restart the server
  %(prog)s status                 Check server status
        """,
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
    _add_bind_arguments(status_parser)

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
            ok = restart_server(args.host, args.port)
        else:
            ok = server_status(args.host, args.port)
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
