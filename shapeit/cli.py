#!/usr/bin/env python3
"""
shapeit CLI: detect shapes in strokes stored as JSON.

Usage:
    shapeit stroke.json                       # one stroke or a list of strokes
    shapeit strokes.json --default-templates  # also match the bundled templates
    shapeit stroke.json --templates mine.json --log-level debug

The input file holds a list of points, a request object
{"points": [...], "atlas": {...}, "thresholds": {...}, "output": {...}},
or a list of request objects. Each point is [x, y] or {"x": ..., "y": ...}.
One JSON result is printed per stroke.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from shapeit.config import settings
from shapeit.engine import DEFAULT_TEMPLATES, ShapeDetector
from shapeit.models.requests import StrokeRequest
from shapeit.models.shapes import ShapeResult

logger = logging.getLogger(__name__)


def load_requests(data: Any) -> list[StrokeRequest]:
    """Stroke requests from parsed JSON in any of the accepted layouts."""
    if isinstance(data, dict):
        return [StrokeRequest.model_validate(data)]
    if isinstance(data, list):
        if data and all(isinstance(item, dict) and "points" in item for item in data):
            return [StrokeRequest.model_validate(item) for item in data]
        return [StrokeRequest.model_validate({"points": data})]
    raise ValueError(f"Expected a point list or a stroke request, got {type(data).__name__}")


def load_templates(path: str | None, include_defaults: bool) -> dict[str, Any]:
    templates: dict[str, Any] = dict(DEFAULT_TEMPLATES) if include_defaults else {}
    if path:
        extra = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(extra, dict):
            raise ValueError("Templates file must map template names to vertex lists")
        templates.update(extra)
    return templates


def detect_request(request: StrokeRequest, templates: dict[str, Any]) -> ShapeResult:
    detector = ShapeDetector(
        atlas={**templates, **request.atlas},
        thresholds=request.thresholds,
        output=request.output,
    )
    return detector.detect(request.coordinates())


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Detect shapes in freehand strokes")
    parser.add_argument("input", help="JSON file with one or more strokes")
    parser.add_argument("--templates", help="JSON file mapping template names to vertex lists")
    parser.add_argument(
        "--default-templates",
        action="store_true",
        help="Also match the bundled default templates",
    )
    parser.add_argument("--log-level", default=None, help="Overrides SHAPEIT_LOG_LEVEL")
    args = parser.parse_args(argv)

    level_name = (args.log_level or settings.shapeit_log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        data = json.loads(Path(args.input).read_text(encoding="utf-8"))
        requests = load_requests(data)
        templates = load_templates(args.templates, args.default_templates)
        results = [detect_request(request, templates) for request in requests]
    except (OSError, ValueError) as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        sys.exit(1)

    for result in results:
        print(json.dumps(result.model_dump(mode="json")))
    logger.info("Detected %d shape(s) from %s", len(results), args.input)


if __name__ == "__main__":
    main()
