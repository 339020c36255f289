"""Development launcher for the fileindex API.

Usage:
    python start_dev.py [--port 8000] [--remote]

Runs uvicorn with auto-reload against the backend/ package tree, using the
local SQLite store unless --remote is given (FILEINDEX_REMOTE_DATABASE_URL
then selects the server). Press Ctrl+C to stop.
"""

from __future__ import annotations

import argparse
import importlib.util
import os
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parent / "backend"

REQUIRED = ("fastapi", "uvicorn", "sqlalchemy", "aiosqlite", "pydantic_settings")


def missing_dependencies(remote: bool) -> list[str]:
    modules = REQUIRED + (("asyncpg",) if remote else ())
    return [name for name in modules if importlib.util.find_spec(name) is None]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the fileindex dev server")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--remote", action="store_true", help="use the remote record store")
    args = parser.parse_args(argv)

    missing = missing_dependencies(args.remote)
    if missing:
        print(f"Missing packages: {', '.join(missing)}", file=sys.stderr)
        print("Install with: pip install -e '.[dev]'", file=sys.stderr)
        return 1

    # Settings are read at import time, so defaults go in before the import
    os.environ.setdefault("FILEINDEX_DEBUG", "true")
    os.environ.setdefault("FILEINDEX_ENVIRONMENT", "development")
    os.environ["FILEINDEX_PORT"] = str(args.port)
    if args.remote:
        os.environ["FILEINDEX_STORE_BACKEND"] = "remote"

    sys.path.insert(0, str(BACKEND_DIR))
    from fileindex.main import run

    try:
        run(app_dir=str(BACKEND_DIR))
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
