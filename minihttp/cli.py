"""
minihttp/cli.py — Command-line interface for the minihttp server.
Runs the server in-process, or under a watchdog-driven reloader that restarts
it whenever source files, pages or order data change.
"""
import argparse
import sys
import os
import signal
import time
import logging
import subprocess
from pathlib import Path
from typing import Optional

from minihttp import __version__, config
from minihttp.colors import ColorFormatter, format_banner
from minihttp.server import Server

# Valid log level names (for CLI validation)
LOG_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

WATCHED_SUFFIXES = (".py", ".html", ".css", ".js", ".json")


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Install the colored formatter on the ``minihttp`` logger."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColorFormatter(show_timestamp=level <= logging.DEBUG))

    logger = logging.getLogger("minihttp")
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False
    return logger


log = logging.getLogger("minihttp")


# Reload Watcher using watchdog

class ReloadManager:
    """
    Manages the server process and restarts it when watched files change.

    Watches the working directory plus the public and data directories for
    changes to .py, .html, .css, .js and .json files, skipping common
    tooling directories like __pycache__, .git and venv.
    """

    EXCLUDE_PATTERNS = {
        "__pycache__",
        ".git",
        ".hg",
        "venv",
        ".venv",
        "env",
        "node_modules",
        ".tox",
        ".eggs",
        "*.egg-info",
        "dist",
        "build",
        ".mypy_cache",
        ".pytest_cache",
    }

    def __init__(self, args: argparse.Namespace):
        self.args = args
        self.process: Optional[subprocess.Popen] = None
        self.should_exit = False
        self.observer = None

    def _should_watch_path(self, path: str) -> bool:
        """True for files with a watched suffix outside excluded directories."""
        if not path.endswith(WATCHED_SUFFIXES):
            return False
        for part in Path(path).parts:
            if part in self.EXCLUDE_PATTERNS:
                return False
            for pattern in self.EXCLUDE_PATTERNS:
                if "*" in pattern and part.endswith(pattern.replace("*", "")):
                    return False
        return True

    def watch_paths(self) -> list[str]:
        """Distinct existing directories to watch."""
        paths = []
        for p in (os.getcwd(), config.public_path(), config.data_path()):
            resolved = str(Path(p).resolve())
            if os.path.isdir(resolved) and resolved not in paths:
                paths.append(resolved)
        return paths

    def _build_subprocess_args(self) -> list[str]:
        """Command line for a non-reloading child server."""
        cmd = [
            sys.executable, "-m", "minihttp",
            "--host", self.args.host,
            "--port", str(self.args.port),
            "--log-level", self.args.log_level,
            "--no-banner",
        ]
        if self.args.read_timeout is not None:
            cmd += ["--read-timeout", str(self.args.read_timeout)]
        return cmd

    def start_server(self):
        """Start the server as a subprocess."""
        log.info("Starting server subprocess...")
        self.process = subprocess.Popen(
            self._build_subprocess_args(),
            stdout=sys.stdout,
            stderr=sys.stderr,
        )

    def stop_server(self):
        """Stop the running server subprocess."""
        if self.process and self.process.poll() is None:
            log.info("Stopping server subprocess...")
            self.process.terminate()
            try:
                self.process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                log.warning("Server did not stop gracefully, killing...")
                self.process.kill()
                self.process.wait()
            self.process = None

    def restart_server(self):
        """Restart the server subprocess."""
        log.info("Restarting server...")
        self.stop_server()
        # Give the OS a moment to release the port
        time.sleep(0.5)
        self.start_server()

    def run_with_reload(self) -> int:
        """Run the server with auto-reload enabled."""
        from watchdog.events import FileSystemEventHandler
        from watchdog.observers import Observer

        class ChangeHandler(FileSystemEventHandler):
            """Triggers a restart on watched file changes, debounced."""

            def __init__(handler_self, manager: "ReloadManager"):
                handler_self.manager = manager
                handler_self.last_reload = 0.0
                handler_self.debounce_seconds = 0.5

            def on_any_event(handler_self, event):
                if event.is_directory:
                    return
                src_path = str(getattr(event, "src_path", ""))
                if not handler_self.manager._should_watch_path(src_path):
                    return

                now = time.time()
                if now - handler_self.last_reload < handler_self.debounce_seconds:
                    return
                handler_self.last_reload = now

                event_type = type(event).__name__.replace("Event", "").lower()
                log.info("Detected %s: %s", event_type, src_path)
                handler_self.manager.restart_server()

        def signal_handler(signum, frame):
            log.info("Received shutdown signal")
            self.should_exit = True

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        event_handler = ChangeHandler(self)
        self.observer = Observer()
        for path in self.watch_paths():
            self.observer.schedule(event_handler, path, recursive=True)
            log.info("Watching for file changes in: %s", path)
        self.observer.start()

        self.start_server()

        try:
            while not self.should_exit:
                if self.process and self.process.poll() is not None:
                    exit_code = self.process.returncode
                    if exit_code != 0:
                        log.warning("Server exited with code %d", exit_code)
                    # Wait for a file change rather than restarting a crash loop
                    self.process = None
                time.sleep(0.5)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop_server()
            self.observer.stop()
            self.observer.join()
            log.info("Shutdown complete")
        return 0


# Direct server runner (no reload)

def run_server_direct(args: argparse.Namespace) -> int:
    """Run the server in the current process until signalled."""
    server = Server(args.host, args.port, args.read_timeout)

    def signal_handler(signum, frame):
        log.info("Received shutdown signal")
        server.signal_exit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        server.serve()
    except OSError as e:
        log.error("Server error: %s", e)
        return 1
    except KeyboardInterrupt:
        log.info("Interrupted")
    finally:
        server.shutdown()
    return 0


# CLI Entry Point

def _timeout(value: str) -> Optional[float]:
    seconds = float(value)
    if seconds < 0:
        raise argparse.ArgumentTypeError("timeout must be >= 0")
    # 0 means block forever
    return seconds or None


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="minihttp - a minimal HTTP/1.1 static page and orders API server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  minihttp                                  Serve the bundled pages on 127.0.0.1:3000
  minihttp --port 8080 --public-path ./www  Serve ./www on a custom port
  minihttp --data-path ./data --reload      Restart on page/data/code changes
        """,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=config.DEFAULT_HOST,
        help=f"Bind socket to this host (default: {config.DEFAULT_HOST})",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=config.DEFAULT_PORT,
        help=f"Bind socket to this port (default: {config.DEFAULT_PORT})",
    )

    parser.add_argument(
        "--public-path",
        type=str,
        default=None,
        help=f"Directory to serve pages from (sets {config.PUBLIC_PATH_ENV}; "
             "default: the bundled public/ directory)",
    )

    parser.add_argument(
        "--data-path",
        type=str,
        default=None,
        help=f"Directory holding {config.ORDERS_FILE} (sets {config.DATA_PATH_ENV}; "
             "default: the bundled data/ directory)",
    )

    parser.add_argument(
        "--read-timeout",
        type=_timeout,
        default=config.DEFAULT_READ_TIMEOUT,
        help=f"Seconds to wait for a client's request before dropping it; "
             f"0 waits forever (default: {config.DEFAULT_READ_TIMEOUT:g})",
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        default=False,
        help="Restart the server when code, pages or order data change (development mode)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=LOG_LEVELS.keys(),
        help="Set the log level (default: info)",
    )

    parser.add_argument(
        "--no-banner",
        action="store_true",
        default=False,
        help=argparse.SUPPRESS,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def print_banner(args: argparse.Namespace):
    rows = [
        ("Address", f"http://{args.host}:{args.port}"),
        ("Public", config.public_path()),
        ("Data", config.data_path()),
    ]
    for line in format_banner(__version__, rows, reload=args.reload):
        print(line)
    print()


def main(args: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    setup_logging(LOG_LEVELS[parsed_args.log_level])

    # Exported so handlers (and a reloader's child process) pick them up
    if parsed_args.public_path:
        os.environ[config.PUBLIC_PATH_ENV] = os.path.abspath(parsed_args.public_path)
    if parsed_args.data_path:
        os.environ[config.DATA_PATH_ENV] = os.path.abspath(parsed_args.data_path)

    if not parsed_args.no_banner:
        print_banner(parsed_args)

    if parsed_args.reload:
        return ReloadManager(parsed_args).run_with_reload()
    return run_server_direct(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
