#!/usr/bin/env python3
"""Run the prediction pipeline for one match from the command line."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from match_insight.aggregation import PrimaryNotFoundError
from match_insight.config import Settings
from match_insight.llm.client import ModelResponseError
from match_insight.llm.compiler import compile_context
from match_insight.llm.validator import PredictionValidationError
from match_insight.service import build_service

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("match_id", help="Identifier of the fixture to predict.")
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional output path. If omitted the artifact JSON is printed to stdout.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Aggregate and compile only; print the request instead of calling the model.",
    )
    parser.add_argument(
        "--database",
        help="SQLite file for stored predictions (default: DATABASE_PATH or match-insight.sqlite).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.database:
        settings = replace(settings, database_path=args.database)

    service = build_service(settings)
    try:
        if args.dry_run:
            request = compile_context(service.aggregator.aggregate(args.match_id))
            output = json.dumps(request.to_payload(), indent=2, ensure_ascii=False)
        else:
            run = service.run(args.match_id)
            if run.context.degraded:
                logger.info("degraded sources: %s", ", ".join(run.context.degraded_sources))
            output = json.dumps(run.artifact.to_response(), indent=2, ensure_ascii=False)
    except PrimaryNotFoundError as exc:
        logger.error("%s", exc)
        return 2
    except (PredictionValidationError, ModelResponseError) as exc:
        logger.error("prediction failed: %s", exc)
        return 1

    if args.output:
        args.output.write_text(output + "\n", encoding="utf-8")
        logger.info("wrote %s", args.output)
    else:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
