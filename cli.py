from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

import uvicorn

from archmodel.config import get_config
from archmodel.errors import ConfigError
from archmodel.logging_config import get_logger, setup_logging
from archmodel.pipeline import analyze_project
from archmodel.summarize import summarize_result


logger = get_logger("cli")


def read_facts(path: str) -> list:
	with open(path, "r", encoding="utf-8") as fh:
		data = json.load(fh)
	if isinstance(data, dict):
		data = data.get("components", [])
	if not isinstance(data, list):
		raise ValueError(f"{path}: expected a list of fact bundles or {{\"components\": [...]}}")
	return data


def cmd_analyze(args: argparse.Namespace) -> int:
	try:
		config = get_config(args.config)
	except ConfigError as e:
		logger.error("%s", e)
		return 2
	try:
		facts = read_facts(args.path)
	except (OSError, ValueError) as e:
		logger.error("Cannot read facts: %s", e)
		return 2

	result = analyze_project(facts, config=config, parallel=not args.sequential)
	if args.summary:
		print(summarize_result(result))
	else:
		print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))
	return 1 if result.error else 0


def cmd_serve(args: argparse.Namespace) -> int:
	uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)
	return 0


def main(argv: Optional[List[str]] = None) -> int:
	parser = argparse.ArgumentParser(prog="archmodel")
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
	sub = parser.add_subparsers(dest="cmd", required=True)

	pa = sub.add_parser("analyze", help="Build the project model from a facts JSON file")
	pa.add_argument("path", help="Path to a JSON list of raw component facts")
	pa.add_argument("--config", help="Classification config JSON (defaults to $ARCHMODEL_CONFIG)")
	pa.add_argument("--sequential", action="store_true", help="Run the analysis stages one after another")
	pa.add_argument("--summary", action="store_true", help="Print a text summary instead of JSON")
	pa.set_defaults(func=cmd_analyze)

	ps = sub.add_parser("serve", help="Run FastAPI server")
	ps.add_argument("--host", default="127.0.0.1")
	ps.add_argument("--port", type=int, default=8000)
	ps.add_argument("--reload", action="store_true")
	ps.set_defaults(func=cmd_serve)

	args = parser.parse_args(argv)
	setup_logging(logging.DEBUG if args.verbose else logging.INFO)
	return args.func(args)


if __name__ == "__main__":
	sys.exit(main())
