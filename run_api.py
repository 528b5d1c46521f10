"""
Launcher for the Ndawonga Construction site API.
"""

import argparse
import os
import socket
from contextlib import closing

import uvicorn
from dotenv import load_dotenv, find_dotenv

from ndawonga.config import Settings
from ndawonga.db import init_db
from ndawonga.seed import seed_demo

# Load environment variables early
load_dotenv(find_dotenv())


def _port_available(host: str, port: int) -> bool:
    """Return True if we can bind to the given host:port."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        try:
            s.bind((host, port))
            return True
        except OSError:
            return False


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Ndawonga Construction API")
    parser.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "5000")))
    parser.add_argument(
        "--reload",
        action="store_true",
        default=os.getenv("RELOAD", "0").strip().lower() not in {"0", "false", "no"},
        help="Enable auto-reload (dev only)",
    )
    parser.add_argument(
        "--seed-demo",
        action="store_true",
        help="Insert demo projects into an empty database before serving",
    )
    args = parser.parse_args()

    if args.seed_demo:
        settings = Settings()
        init_db(settings.DB_PATH)
        added = seed_demo(settings.DB_PATH)
        print(f"[run_api] Seeded {added} demo project(s) into {settings.DB_PATH}")

    host = args.host
    port = args.port
    if not _port_available(host, port):
        print(f"[run_api] Port {port} is busy; selecting an ephemeral port.")
        port = 0

    uvicorn_kwargs = dict(
        host=host,
        port=port,
        reload=args.reload,
        log_level="info",
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
    if args.reload:
        # Keep the watcher away from the database directory
        uvicorn_kwargs["reload_excludes"] = [".data/*", "**/__pycache__/*", ".venv/*"]
    # Import string so --reload works as well
    uvicorn.run("api.server:app", **uvicorn_kwargs)


if __name__ == "__main__":
    main()
