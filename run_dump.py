#!/usr/bin/env python3
"""
Dump the semantic model built from a serialized CodeGeneratorRequest.

The request is read from a file or from stdin, the registry is built and a
nested summary is written to stdout as JSON or YAML. Useful for inspecting
what a template would see for a given set of schema files.

Usage:
    python run_dump.py --input request.bin
    python run_dump.py --input request.bin --format yaml --to-generate-only
    cat request.bin | python run_dump.py --log-level DEBUG
"""

import argparse
import json
import logging
import sys

import yaml

from core.startup_config import ConfigValidationError
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id
from protomodel.config import load_model_settings
from protomodel.errors import ModelBuildError
from protomodel.ingest import build_registry, parse_request
from protomodel.summary import describe_registry

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Protobuf descriptor semantic model dump",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_dump.py --input request.bin\n"
            "  python run_dump.py --input request.bin --format yaml --to-generate-only\n"
        ),
    )
    parser.add_argument(
        "--input",
        default=None,
        help="Serialized CodeGeneratorRequest. Reads stdin when omitted.",
    )
    parser.add_argument(
        "--format",
        choices=("json", "yaml"),
        default="json",
        help="Output format. Default: json",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML settings file (see protomodel.config).",
    )
    parser.add_argument(
        "--to-generate-only",
        action="store_true",
        default=False,
        help="Only include files selected for generation.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Log level for stderr output. Default: INFO",
    )
    return parser.parse_args(argv)


def read_request_bytes(path) -> bytes:
    """Read the raw request from ``path`` or from stdin."""
    if path:
        with open(path, "rb") as f:
            return f.read()
    return sys.stdin.buffer.read()


def render(summary: dict, fmt: str) -> str:
    if fmt == "yaml":
        return yaml.safe_dump(summary, sort_keys=False, allow_unicode=True)
    return json.dumps(summary, indent=2, ensure_ascii=False) + "\n"


def main(argv=None) -> int:
    """Main entry point for the dump tool."""
    args = parse_args(argv)
    configure_structured_logging(level=getattr(logging, args.log_level))
    run_id = set_run_id()
    logger.info("Starting descriptor dump (run_id=%s)", run_id)

    try:
        with phase_scope("read"):
            request = parse_request(read_request_bytes(args.input))
        logger.info(
            "Request: %d files, %d to generate",
            len(request.proto_file),
            len(request.file_to_generate),
        )

        settings = load_model_settings(
            config_path=args.config,
            parameter=request.parameter,
        )
        registry = build_registry(request, settings=settings)

        with phase_scope("render"):
            summary = describe_registry(registry, to_generate_only=args.to_generate_only)
            sys.stdout.write(render(summary, args.format))
    except FileNotFoundError as e:
        logger.error("File error: %s", e)
        return 1
    except ConfigValidationError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except ModelBuildError as e:
        logger.error("Model build failed: %s", e)
        return 1
    except Exception as e:
        logger.error("Dump failed: %s", e, exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
