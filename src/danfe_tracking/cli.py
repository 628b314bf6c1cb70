# src/danfe_tracking/cli.py
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config.env import EnvError, get_app_env
from .config.logging_config import default_log_path_for_input, get_logger
from .errors import TrackingError
from .io.paths import derive_output_paths
from .pipelines.tracking_pipeline import TrackingPipeline


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="danfe-tracking",
        description="Track a shipment by NF-e access key (typed or read from the NF-e XML) via SSW.",
    )
    p.add_argument("key", nargs="?", default=None,
                   help="44-digit DANFE access key.")
    p.add_argument("--xml", type=Path, default=None,
                   help="NF-e XML file to read the access key (and shipment details) from.")
    p.add_argument("--batch", type=Path, default=None,
                   help="Workbook/CSV of access keys; writes <stem>_processed.xlsx beside it.")
    p.add_argument(
        "--replay",
        type=Path,
        default=None,
        help="JSON file of recorded SSW bodies to serve instead of calling the API.",
    )
    p.add_argument("--record", type=Path, default=None,
                   help="Append every SSW body fetched to this JSON file (replayable).")
    p.add_argument("--json", action="store_true",
                   help="Print the tracking record as JSON instead of text.")
    p.add_argument("--summary", action="store_true",
                   help="Add an AI summary (requires GEMINI_API_KEY).")
    p.add_argument("--export", type=Path, default=None,
                   help="Also write the record to this .xlsx workbook.")
    p.add_argument(
        "--no-console",
        action="store_true",
        help="Disable console logging (file logging remains).",
    )
    p.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Default: INFO",
    )
    p.add_argument(
        "--strict-env",
        action="store_true",
        help="Require GEMINI_API_KEY (or API_KEY) to be present; otherwise exit 2.",
    )
    return p


def _build_source(args, env_cfg, logger):
    if args.replay:
        # Lazy imports to keep startup light
        from .api.client import ReplayClient

        source = ReplayClient(args.replay)
        logger.info("Replay mode enabled: %s", args.replay)
    else:
        from .api.ssw import SswClient, SswConfig
        from .api.transport import RequestsTransport

        source = SswClient(
            SswConfig(base_url=env_cfg.SSW_BASE_URL),
            transport=RequestsTransport(timeout=env_cfg.SSW_TIMEOUT),
        )
        logger.info("Live SSW API enabled (base=%s)", env_cfg.SSW_BASE_URL)

    if args.record:
        from .api.payload_writer import PayloadWriter, RecordingSource

        source = RecordingSource(source, PayloadWriter(args.record))
        logger.info("Recording SSW bodies to %s", args.record)
    return source


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    inputs = [x for x in (args.key, args.xml, args.batch) if x is not None]
    if len(inputs) != 1:
        print("error: give exactly one of KEY, --xml or --batch", file=sys.stderr)
        return 2

    file_input = args.xml or args.batch
    if file_input is not None and not Path(file_input).exists():
        print(f"error: input file not found: {file_input}", file=sys.stderr)
        return 2

    logger = get_logger(
        "danfe_tracking",
        level=args.log_level,
        console=not args.no_console,
        log_file=default_log_path_for_input(file_input) if file_input else None,
    )
    logger.debug("Logger initialized.")

    try:
        env_cfg = get_app_env(strict=args.strict_env)
    except EnvError as e:
        logger.error("Environment error: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2

    try:
        source = _build_source(args, env_cfg, logger)
    except ValueError as e:
        logger.error("Replay error: %s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2

    summarizer = None
    if args.summary:
        from .summary.gemini import GeminiSummarizer

        summarizer = GeminiSummarizer(env_cfg.GEMINI_API_KEY, model=env_cfg.GEMINI_MODEL)

    pipeline = TrackingPipeline(source, logger, summarizer=summarizer)

    if args.batch:
        from .pipelines.batch import BatchProcessor

        processed_path, _log = derive_output_paths(args.batch)
        BatchProcessor(logger, pipeline=pipeline).process(args.batch, processed_path)
        print(processed_path)
        return 0

    try:
        result = pipeline.track_xml(args.xml) if args.xml else pipeline.track_key(args.key)
    except TrackingError as e:
        logger.error("Lookup failed: %s", e.user_message)
        print(f"error: {e.user_message}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({
            "record": result.record.to_dict(),
            "summary": result.summary,
            "anomalies": [str(a) for a in result.anomalies],
        }, ensure_ascii=False, indent=2))
    else:
        from .export.text import render_text

        print(render_text(result.record, summary=result.summary), end="")

    if args.export:
        from .export.workbook import export_workbook

        export_workbook([result.record], args.export)
        logger.info("Exported workbook → %s", args.export)

    logger.info("Done.")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
