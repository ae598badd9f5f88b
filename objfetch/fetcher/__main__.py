"""
CLI entry point for one-shot object fetches.

Builds a single flow unit from ``--attr`` values, runs one trigger of the
object fetcher against S3, and reports the routed unit.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..schema.flow import FlowUnit
from .config.settings import FetcherSettings, load_settings
from .core.exceptions import ConfigurationException
from .host.expressions import AttributeExpressionEvaluator
from .host.memory import InMemoryRouter, InMemoryUnitSource, LoggingAuditSink
from .processor.get_object import ObjectFetcher
from .storage.s3_client import S3ObjectStore
from .utils.logging import setup_fetcher_logger



def parse_attributes(pairs: Optional[List[str]]) -> Dict[str, str]:
    """
    Parse ``NAME=VALUE`` pairs.

    Raises:
        ConfigurationException: If a pair has no ``=`` or an empty name
    """
    attributes: Dict[str, str] = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise ConfigurationException(f"Invalid attribute {pair!r}, expected NAME=VALUE")
        attributes[name.strip()] = value
    return attributes


def run_fetch(
    settings: FetcherSettings,
    attributes: Dict[str, str],
    output: Optional[Path] = None,
    store: Optional[Any] = None,
) -> int:
    """
    Fetch one object and report the result.

    Args:
        settings: Fetcher settings
        attributes: Attributes of the unit to process
        output: File to write the payload to on success
        store: Object store override (defaults to S3)

    Returns:
        Process exit code: 0 on success, 1 on failure
    """
    source = InMemoryUnitSource([FlowUnit(attributes=attributes)])
    router = InMemoryRouter()
    fetcher = ObjectFetcher(
        settings=settings,
        store=store or S3ObjectStore(settings),
        source=source,
        evaluator=AttributeExpressionEvaluator(),
        router=router,
        audit=LoggingAuditSink(),
    )

    outcome = fetcher.on_trigger()
    if outcome is None:
        print("No unit to process")
        return 1

    report: Dict[str, Any] = {
        "channel": outcome.channel.value,
        "unit_id": outcome.unit.uuid,
        "size": outcome.unit.size,
        "attributes": outcome.unit.attributes,
    }
    if outcome.error_type is not None:
        report["error_type"] = outcome.error_type.value
        report["error"] = outcome.error_message

    if outcome.succeeded and output is not None:
        output.write_bytes(outcome.unit.content)
        report["output"] = str(output)

    print(json.dumps(report, indent=2, sort_keys=True))
    return 0 if outcome.succeeded else 1


def show_config(settings: FetcherSettings) -> int:
    print(json.dumps(settings.masked(), indent=2, sort_keys=True))
    return 0


def _add_settings_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", "-c", type=Path, help="YAML configuration file")
    parser.add_argument("--bucket", help="Bucket name expression")
    parser.add_argument("--key", help="Object key expression")
    parser.add_argument("--region", help="AWS region")
    parser.add_argument("--endpoint-url", help="S3-compatible endpoint URL")
    parser.add_argument("--timeout", type=int, help="Request timeout in seconds")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Fetch a single S3 object as a flow unit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m objfetch.fetcher fetch --bucket my-bucket --key reports/2024.csv --output 2024.csv
  python -m objfetch.fetcher fetch --bucket my-bucket --key '${filename}' --attr filename=a.txt
  python -m objfetch.fetcher fetch --bucket my-bucket --key big.bin --range-start 0 --range-end 1023
  python -m objfetch.fetcher show-config --config fetcher.yaml
        """,
    )
    parser.add_argument(
        "--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level"
    )
    parser.add_argument("--json-logs", action="store_true", help="Output JSON format logs")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    fetch_parser = subparsers.add_parser("fetch", help="Fetch one object")
    _add_settings_arguments(fetch_parser)
    fetch_parser.add_argument("--version", dest="version_id", help="Object version expression")
    fetch_parser.add_argument("--range-start", help="First byte index expression")
    fetch_parser.add_argument("--range-end", help="Last byte index expression")
    fetch_parser.add_argument("--range-mode", choices=["explicit", "always"], help="When to send a byte range")
    fetch_parser.add_argument("--attr", "-a", action="append", metavar="NAME=VALUE", help="Unit attribute")
    fetch_parser.add_argument("--output", "-o", type=Path, help="Write the object content to this file")

    config_parser = subparsers.add_parser("show-config", help="Show resolved settings")
    _add_settings_arguments(config_parser)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_fetcher_logger("objfetch", level=args.log_level, json_logs=args.json_logs)

    overrides: Dict[str, Any] = {
        "bucket": args.bucket,
        "key": args.key,
        "region": args.region,
        "endpoint_url": args.endpoint_url,
        "timeout": args.timeout,
    }
    if args.command == "fetch":
        overrides.update(
            version_id=args.version_id,
            range_start=args.range_start,
            range_end=args.range_end,
            range_mode=args.range_mode,
        )

    try:
        settings = load_settings(config_file=args.config, **overrides)
    except (ValidationError, FileNotFoundError) as e:
        print(f"Invalid configuration: {e}")
        return 1

    try:
        if args.command == "fetch":
            return run_fetch(settings, parse_attributes(args.attr), output=args.output)
        elif args.command == "show-config":
            return show_config(settings)
        else:
            print(f"Unknown command: {args.command}")
            return 1
    except ConfigurationException as e:
        print(f"Invalid arguments: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
