#!/usr/bin/env python3
"""
Stagescope CLI tool

Command line interface for starting the dashboard and inspecting collector output
"""

from __future__ import annotations

import argparse
import os
import socket
import sys

import uvicorn

from stagescope.catalog import AppCatalog
from stagescope.config import get_data_dir
from stagescope.exceptions import AppNotFoundError
from stagescope.presenter import BatchPresenter


def find_available_port(start_port: int = 3151, max_attempts: int = 100) -> int | None:
    """
    Find an available port number

    Args:
        start_port: Starting port number
        max_attempts: Maximum number of attempts

    Returns:
        Available port number, None if not found
    """
    for port in range(start_port, start_port + max_attempts):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            # If connection fails, that port is available
            result = sock.connect_ex(("127.0.0.1", port))
            if result != 0:
                return port
    return None


def run_dashboard(
    host: str = "127.0.0.1",
    port: int = 3151,
    data_dir: str | None = None,
    dev: bool = False,
) -> None:
    """
    Start dashboard server

    Args:
        host: Host name
        port: Port number
        data_dir: Directory holding collector output
        dev: Enable development mode with auto-reload
    """
    if dev:
        os.environ["STAGESCOPE_DEV_MODE"] = "1"

    if data_dir is None:
        data_dir = str(get_data_dir())

    # Propagate to reload workers, which re-import the app
    os.environ["STAGESCOPE_DATA_DIR"] = os.path.abspath(data_dir)

    from stagescope.dashboard.router import configure_data_dir

    configure_data_dir(data_dir)

    print("Starting Stagescope Dashboard server...")
    print(f"Access http://{host}:{port}/docs/dashboard in your browser!")
    print(f"Data directory: {os.path.abspath(data_dir)}")
    if dev:
        print("Development mode: auto-reload enabled")

    uvicorn.run("stagescope.dashboard.main:app", host=host, port=port, reload=dev)


def _load_presenter(app: str, data_dir: str | None) -> BatchPresenter:
    catalog = AppCatalog(data_dir or get_data_dir())
    try:
        timeline = catalog.load_timeline(app)
        return BatchPresenter(
            catalog.load_samples(app),
            stages=timeline.stages,
            jobs=timeline.jobs,
            tooltips=catalog.load_tooltips(app),
        )
    except (AppNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)


def print_metric_paths(app: str, data_dir: str | None = None) -> None:
    """Print the selectable metric paths of an application, one per line."""
    for path in _load_presenter(app, data_dir).metric_paths:
        print(path)


def print_chart(app: str, metric_path: str, data_dir: str | None = None) -> None:
    """Print the chart payload of one metric path as JSON."""
    payload = _load_presenter(app, data_dir).render(metric_path)
    print(payload.model_dump_json(indent=2))


def main() -> None:
    """
    Main CLI entry point
    """
    parser = argparse.ArgumentParser(description="Stagescope - executor metrics aligned with the job timeline")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Start the dashboard server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to bind to (default: first free from 3151)")
    serve_parser.add_argument("--data-dir", default=None, help="Directory holding collector output")
    serve_parser.add_argument("--dev", action="store_true", help="Enable development mode with auto-reload")

    paths_parser = subparsers.add_parser("paths", help="List the metric paths of an application")
    paths_parser.add_argument("app", help="Application id")
    paths_parser.add_argument("--data-dir", default=None, help="Directory holding collector output")

    chart_parser = subparsers.add_parser("chart", help="Print the chart payload of a metric path")
    chart_parser.add_argument("app", help="Application id")
    chart_parser.add_argument("path", help="Dot-joined metric path")
    chart_parser.add_argument("--data-dir", default=None, help="Directory holding collector output")

    args = parser.parse_args()

    if args.command == "serve":
        port = args.port
        if port is None:
            port = find_available_port()
            if port is None:
                print("Error: No available port found!")
                sys.exit(1)
        run_dashboard(host=args.host, port=port, data_dir=args.data_dir, dev=args.dev)
    elif args.command == "paths":
        print_metric_paths(args.app, data_dir=args.data_dir)
    elif args.command == "chart":
        print_chart(args.app, args.path, data_dir=args.data_dir)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
