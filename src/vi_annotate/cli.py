from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Optional

from dotenv import load_dotenv

from .client import API_MODULES, VideoIntelligenceClient
from .config import Settings
from .dto import AnnotateVideoRequest, OperationStatus
from .errors import WaitTimeoutError
from .logging import setup_logging
from .utils.jsonable import to_jsonable


def _status_json(status: OperationStatus) -> str:
    return json.dumps(
        {
            "done": status.done,
            "metadata": to_jsonable(status.metadata),
            "result": to_jsonable(status.result),
            "error": status.error.model_dump() if status.error else None,
        },
        indent=2,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Video Intelligence annotateVideo client")
    parser.add_argument("--api-version", choices=sorted(API_MODULES), help="Overrides VI_API_VERSION")
    parser.add_argument("--api-endpoint", help="Overrides VI_API_ENDPOINT")
    parser.add_argument("--log-level", help="Overrides LOG_LEVEL, e.g. DEBUG")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_ann = sub.add_parser("annotate", help="Start annotateVideo and poll until done")
    p_ann.add_argument("--input-uri", required=True, help="gs://bucket/object")
    p_ann.add_argument("--feature", action="append", required=True, help="e.g. LABEL_DETECTION; repeatable")
    p_ann.add_argument("--output-uri")
    p_ann.add_argument("--location-id")
    p_ann.add_argument("--timeout", type=float, help="Polling deadline in seconds (overrides POLL_TIMEOUT)")
    p_ann.add_argument("--wait-timeout", type=float, help="Stop waiting after N seconds, leaving the operation running")
    p_ann.add_argument("--cancel-remote-on-timeout", action="store_true")

    p_status = sub.add_parser("status", help="Fetch one status snapshot of an operation")
    p_status.add_argument("--name", required=True)

    p_cancel = sub.add_parser("cancel", help="Request remote cancellation of an operation")
    p_cancel.add_argument("--name", required=True)
    return parser


async def _annotate(client: VideoIntelligenceClient, args: argparse.Namespace, timeout: Optional[float]) -> None:
    req = AnnotateVideoRequest(
        input_uri=args.input_uri,
        features=args.feature,
        output_uri=args.output_uri,
        location_id=args.location_id,
    )
    future = await client.annotate_video(req, timeout=timeout)
    print(f"[annotate] operation: {future.name}")
    future.on_progress(lambda metadata: print(f"[progress] {json.dumps(to_jsonable(metadata))}"))
    try:
        result = await future.wait(timeout=args.wait_timeout)
    except WaitTimeoutError:
        if not args.cancel_remote_on_timeout:
            raise
        future.cancel(remote=True)
        # raises CanceledError unless the operation finished in the meantime
        result = await future.wait()
    print(json.dumps(to_jsonable(result), indent=2))


def main(argv: Optional[list[str]] = None) -> None:
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    settings = Settings.from_env()
    log = logging.getLogger("cli")

    client = VideoIntelligenceClient(
        api_version=args.api_version or settings.api_version,
        api_endpoint=args.api_endpoint or settings.api_endpoint,
        polling=settings.polling_config(),
        initial_call_retries=settings.rpc_retries,
    )
    try:
        if args.cmd == "annotate":
            timeout = args.timeout if args.timeout is not None else settings.poll_timeout
            asyncio.run(_annotate(client, args, timeout))
        elif args.cmd == "status":
            status = asyncio.run(client.get_operation(args.name))
            print(_status_json(status))
        elif args.cmd == "cancel":
            asyncio.run(client.cancel_operation(args.name))
            print(f"[cancel] requested for {args.name}")
    except Exception as e:  # noqa: BLE001
        log.error("Error: %s", e)
        raise


if __name__ == "__main__":
    main()
