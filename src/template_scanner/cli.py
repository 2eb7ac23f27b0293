"""Command-line entry point: enqueue stale templates, run a worker, or serve the trigger."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys

from template_scanner.config import Settings, load_env_files
from template_scanner.errors import ConfigError, TemplateScannerError
from template_scanner.pipeline.producer import MAX_BATCH_LIMIT, enqueue_stale
from template_scanner.pipeline.worker import Worker
from template_scanner.services import open_services

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="template-scanner",
        description="Rescan stale template repositories and refresh their catalog rows.",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--worker",
        action="store_true",
        help="Consume scan jobs until interrupted.",
    )
    mode.add_argument(
        "--serve",
        action="store_true",
        help="Serve POST /api/scanner, which enqueues stale templates on demand.",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help=f"Maximum templates to enqueue per run (1-{MAX_BATCH_LIMIT}). Defaults to SCAN_BATCH_SIZE or 10.",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address for --serve.")
    parser.add_argument("--port", type=int, default=8000, help="Port for --serve.")
    return parser.parse_args(argv)


async def _enqueue(settings: Settings, batch_size: int) -> int:
    async with open_services(settings) as services:
        result = await enqueue_stale(services.store, services.queue, max_batch=batch_size)
    print(json.dumps(result.to_dict(), indent=2))
    return 0


async def _work(settings: Settings) -> int:
    async with open_services(settings) as services:
        worker = Worker(
            settings.queue_name,
            services.processor(),
            connection=settings.redis_url,
            concurrency=settings.queue_concurrency,
        )
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, worker.stop)
        try:
            await worker.run()
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
    return 0


def _serve(settings: Settings, batch_size: int, host: str, port: int) -> int:
    import uvicorn

    from template_scanner.api import create_app

    app = create_app(lambda: open_services(settings), batch_size=batch_size)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    load_env_files()

    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        print(f"template-scanner: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    batch_size = args.batch_size if args.batch_size is not None else settings.scan_batch_size
    if not 1 <= batch_size <= MAX_BATCH_LIMIT:
        print(f"template-scanner: batch size must be between 1 and {MAX_BATCH_LIMIT}", file=sys.stderr)
        return 2

    try:
        if args.serve:
            return _serve(settings, batch_size, args.host, args.port)
        if args.worker:
            return asyncio.run(_work(settings))
        return asyncio.run(_enqueue(settings, batch_size))
    except TemplateScannerError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
