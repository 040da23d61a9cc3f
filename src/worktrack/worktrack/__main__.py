from __future__ import annotations

import argparse
import os

from .main import create_app
from .server import serve


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="worktrack", description="Run the worktrack API server.")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "3000")))
    parser.add_argument("--env", choices=("development", "production", "testing"), help="overrides APP_ENV")
    args = parser.parse_args(argv)

    if args.env:
        os.environ["APP_ENV"] = args.env
    serve(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
