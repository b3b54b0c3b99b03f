#!/usr/bin/env python3
"""
Start the API with uvicorn for local development.

Usage:
    python scripts/run_server.py
    python scripts/run_server.py --port 3000 --reload
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the NetTap API server")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    project_root = str(Path(__file__).parent.parent)

    print("=" * 60)
    print("NETTAP API")
    print("=" * 60)
    print(f"Serving on http://{args.host}:{args.port} (docs at /docs)")
    print()

    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        reload_dirs=[project_root] if args.reload else None,
        app_dir=project_root,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
