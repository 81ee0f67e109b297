#!/usr/bin/env python3
"""
Stockcore management CLI.

Usage:
    python manage.py start       Start the API server in the background
    python manage.py stop        Graceful shutdown
    python manage.py restart     Stop + start
    python manage.py dev         Run the server in the foreground with reload
    python manage.py status      Check if server is running
    python manage.py migrate     Apply pending database migrations (--status, --verify)
    python manage.py seed FILE   Load products, warehouses and users from JSON
"""

import argparse
import asyncio
import json
import os
import platform
import signal
import socket
import subprocess
import sys
import time
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
PID_FILE = ROOT_DIR / ".stockcore.pid"

IS_WINDOWS = platform.system() == "Windows"


def _read_pid() -> int | None:
    """Read PID from the pid file, return None if missing or stale."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
    except (ValueError, OSError):
        return None
    if _is_pid_alive(pid):
        return pid
    # Stale PID file
    PID_FILE.unlink(missing_ok=True)
    return None


def _is_pid_alive(pid: int) -> bool:
    """Check if a process with the given PID is running."""
    if IS_WINDOWS:
        try:
            result = subprocess.run(
                ["tasklist", "/FI", f"PID eq {pid}", "/NH"],
                capture_output=True,
                text=True,
            )
            return str(pid) in result.stdout
        except OSError:
            return False
    try:
        os.kill(pid, 0)
        return True
    except OSError:
        return False


def _kill_pid(pid: int) -> bool:
    """Send termination signal to a process. Returns True if successful."""
    try:
        if IS_WINDOWS:
            subprocess.run(["taskkill", "/PID", str(pid), "/T", "/F"], capture_output=True)
        else:
            os.kill(pid, signal.SIGTERM)
        return True
    except OSError:
        return False


def _is_port_free(port: int) -> bool:
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", port))
        return True
    except OSError:
        return False


def _wait_for_exit(pid: int, timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if not _is_pid_alive(pid):
            return True
        time.sleep(0.1)
    return not _is_pid_alive(pid)


def _uvicorn_cmd(host: str, port: int, reload: bool = False, workers: int = 1) -> list[str]:
    cmd = [
        sys.executable, "-m", "uvicorn",
        "src.api.main:app",
        "--host", host,
        "--port", str(port),
    ]
    if reload:
        cmd.append("--reload")
    elif workers > 1:
        cmd += ["--workers", str(workers)]
    return cmd


def cmd_start(args: argparse.Namespace) -> None:
    """Start the server in the background."""
    existing_pid = _read_pid()
    if existing_pid is not None:
        print(f"Server already running (PID {existing_pid}). Use 'restart' or 'stop' first.")
        sys.exit(1)

    if not _is_port_free(args.port):
        print(f"Error: Port {args.port} is in use.")
        sys.exit(1)

    if args.workers > 1:
        # Cell leases are per process; SQLite's write lock still serializes commits
        print("Warning: running several workers; concurrent updates to one cell "
              "will wait on the database lock instead of failing fast.")

    print(f"Starting server on {args.host}:{args.port}...")
    if IS_WINDOWS:
        proc = subprocess.Popen(
            _uvicorn_cmd(args.host, args.port, workers=args.workers),
            cwd=str(ROOT_DIR),
            creationflags=subprocess.CREATE_NEW_PROCESS_GROUP,
        )
    else:
        proc = subprocess.Popen(
            _uvicorn_cmd(args.host, args.port, workers=args.workers),
            cwd=str(ROOT_DIR),
        )

    PID_FILE.write_text(str(proc.pid))
    print(f"Server started (PID {proc.pid}).")
    print(f"  API:      http://{args.host}:{args.port}/api")
    print(f"  Realtime: ws://{args.host}:{args.port}/ws/inventory")
    print(f"  PID file: {PID_FILE}")


def cmd_stop(args: argparse.Namespace) -> None:
    """Stop the running server."""
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return

    print(f"Stopping server (PID {pid})...")
    if _kill_pid(pid) and not _wait_for_exit(pid):
        print("Warning: Process did not exit within 3 seconds.")

    PID_FILE.unlink(missing_ok=True)
    if not _is_pid_alive(pid):
        print("Server stopped.")
    else:
        print("Warning: Server may still be running.")


def cmd_restart(args: argparse.Namespace) -> None:
    """Stop then start the server."""
    cmd_stop(args)
    cmd_start(args)


def cmd_dev(args: argparse.Namespace) -> None:
    """Run the server in the foreground with auto-reload."""
    print(f"Starting server on {args.host}:{args.port} (reload mode)...")
    try:
        subprocess.run(_uvicorn_cmd(args.host, args.port, reload=True), cwd=str(ROOT_DIR))
    except KeyboardInterrupt:
        print("\nServer stopped.")


def cmd_status(args: argparse.Namespace) -> None:
    """Check if the server is running."""
    pid = _read_pid()
    if pid is not None:
        print(f"Server is running (PID {pid}).")
    elif not _is_port_free(args.port):
        print(f"No PID file, but port {args.port} is in use.")
    else:
        print(f"Server is not running (port {args.port} is free).")


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations, or report on the schema."""
    from src.infrastructure.storage.sqlite.migrations.migrator import (
        get_migration_status,
        initialize_database,
        verify_schema_integrity,
    )

    if args.status:
        status = asyncio.run(get_migration_status(args.db_path))
        if not status.exists:
            print("Database does not exist yet.")
        print(f"Current version: {status.current_version or 'none'}")
        print(f"Pending: {', '.join(status.pending) or 'none'}")
        return

    if args.verify:
        problems = asyncio.run(verify_schema_integrity(args.db_path))
        for check, details in problems.items():
            print(f"  {check}: {', '.join(details)}")
        if problems:
            sys.exit(1)
        print("Schema OK.")
        return

    results = asyncio.run(initialize_database(args.db_path, create_backup_before=not args.no_backup))
    if not results:
        print("Database is up to date.")
    for result in results:
        state = "OK" if result.success else f"FAILED: {result.error}"
        print(f"  {result.version}: {state}")
    if any(not r.success for r in results):
        sys.exit(1)


async def seed_reference_data(data: dict) -> dict[str, int]:
    """Upsert products, warehouses and users through the inventory gateway."""
    from src.core.entities.inventory import Product, UserProfile, Warehouse
    from src.infrastructure.storage.sqlite import close_pool, get_inventory_gateway

    gateway = get_inventory_gateway()
    counts = {"warehouses": 0, "products": 0, "users": 0}
    try:
        for raw in data.get("warehouses", []):
            await gateway.save_warehouse(Warehouse(**raw))
            counts["warehouses"] += 1
        for raw in data.get("products", []):
            await gateway.save_product(Product(**raw))
            counts["products"] += 1
        for raw in data.get("users", []):
            await gateway.save_user(UserProfile(**raw))
            counts["users"] += 1
    finally:
        await close_pool()
    return counts


def cmd_seed(args: argparse.Namespace) -> None:
    """Load reference data from a JSON file."""
    path = Path(args.file)
    if not path.exists():
        print(f"Error: {path} not found.")
        sys.exit(1)

    data = json.loads(path.read_text(encoding="utf-8"))
    counts = asyncio.run(seed_reference_data(data))
    print(
        f"Seeded {counts['warehouses']} warehouses, {counts['products']} products, "
        f"{counts['users']} users."
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Stockcore management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name, func, help_text in (
        ("start", cmd_start, "Start the server"),
        ("restart", cmd_restart, "Restart the server"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
        p.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
        p.add_argument("--workers", type=int, default=1, help="Number of uvicorn workers")
        p.set_defaults(func=func)

    p_stop = sub.add_parser("stop", help="Stop the server")
    p_stop.set_defaults(func=cmd_stop)

    p_dev = sub.add_parser("dev", help="Run the server with auto-reload")
    p_dev.add_argument("--host", default="127.0.0.1", help="Bind host (default: 127.0.0.1)")
    p_dev.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    p_dev.set_defaults(func=cmd_dev)

    p_status = sub.add_parser("status", help="Check if server is running")
    p_status.add_argument("--port", type=int, default=8000, help="Port to check (default: 8000)")
    p_status.set_defaults(func=cmd_status)

    p_migrate = sub.add_parser("migrate", help="Apply pending migrations")
    p_migrate.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip backup before migrating")
    p_migrate.add_argument("--status", action="store_true", help="Show applied and pending versions")
    p_migrate.add_argument("--verify", action="store_true", help="Run integrity checks")
    p_migrate.set_defaults(func=cmd_migrate)

    p_seed = sub.add_parser("seed", help="Load reference data from JSON")
    p_seed.add_argument("file", help="JSON file with warehouses, products and users lists")
    p_seed.set_defaults(func=cmd_seed)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
