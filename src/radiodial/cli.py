"""Command line entry point: ``radiodial import`` and ``radiodial serve``."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from radiodial.config import Settings, get_settings
from radiodial.logging import setup_logging
from radiodial.wiring import build_components

logger = logging.getLogger(__name__)


async def _run_import(settings: Settings, confirm: bool) -> int:
    components = build_components(settings)
    try:
        result = await components.station_service.import_snapshot(confirm=confirm)
    finally:
        await components.aclose()
    print(json.dumps(result.to_dict()))
    return 0 if result.success else 1


def _serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("radiodial.api.app:app", host=host, port=port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="radiodial", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    imp = sub.add_parser(
        "import",
        help="Overwrite the blob tier with the build-time snapshot",
    )
    imp.add_argument(
        "--yes",
        action="store_true",
        help="Confirm that all admin edits since the last import will be lost",
    )
    imp.add_argument("--snapshot", type=Path, help="Snapshot file to import")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    if args.command == "serve":
        return _serve(args.host, args.port)

    if args.snapshot is not None:
        settings = settings.model_copy(update={"snapshot_path": args.snapshot})
    if not args.yes:
        logger.error("Refusing to import without --yes")
    return asyncio.run(_run_import(settings, args.yes))


if __name__ == "__main__":
    sys.exit(main())
