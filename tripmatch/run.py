"""
Command-line entrypoint for the trip matching engine.

Usage:
    python -m tripmatch.run prefilter --records records.json --query query.json
    python -m tripmatch.run match --pair pair.json
    python -m tripmatch.run verify --pair pair.json --backend backend.json

Input files:
- records.json: {"records": ["<base64 account data>", ...]} or a list of
  {"tripId": "...", "data": "<base64>"} objects
- query.json: pre-filter request body (destinationGridHash, startDate,
  endDate, excludeOwners, limit)
- pair.json: {"trip_a": MatchInput, "trip_b": MatchInput}
- backend.json: backend result with the four scores

Results are printed to stdout as JSON.
"""

import argparse
import base64
import binascii
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .configs import get_config_value, load_config, validate_config
from .errors import ConfigurationError, ValidationError
from .evaluation import verify_backend_result
from .prefilter import parse_query_request, run_prefilter
from .scoring import MatchInput, ScoreWeights, create_scorer_from_config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/config.yaml"


def setup_logging(log_level: str) -> None:
    """Configure logging level from config."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)


def load_runtime_config(config_path: Optional[str]) -> Dict[str, Any]:
    """
    Load and validate the configuration.

    A missing file at the default path falls back to built-in defaults.
    An invalid configuration is fatal.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if config_path is None and not Path(path).exists():
        logger.info("No configuration file found, using built-in defaults")
        return {}

    config = load_config(path)
    issues = validate_config(config)
    for issue in issues:
        logger.warning(f"Config issue: {issue}")
    # Weights are fatal at load time, not at the first scoring call
    ScoreWeights.from_config(config)

    setup_logging(config.get("global", {}).get("log_level", "INFO"))
    return config


def _read_json(filepath: str) -> Any:
    with open(filepath, "r") as f:
        return json.load(f)


def load_records(filepath: str) -> List[Tuple[Optional[str], bytes]]:
    """
    Load base64-encoded records from a JSON file.

    Entries that are not valid base64 are kept as empty buffers so that the
    pre-filter counts and skips them like any other undecodable record.
    """
    data = _read_json(filepath)
    entries = data["records"] if isinstance(data, dict) else data

    records = []
    for index, entry in enumerate(entries):
        if isinstance(entry, dict):
            trip_id, encoded = entry.get("tripId"), entry.get("data", "")
        else:
            trip_id, encoded = None, entry
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (binascii.Error, TypeError, ValueError):
            logger.warning(f"Record {index} is not valid base64")
            raw = b""
        records.append((trip_id, raw))

    logger.info(f"Loaded {len(records)} records from {filepath}")
    return records


def run_prefilter_command(records_path: str, query_path: str, config: Dict[str, Any]) -> Dict[str, Any]:
    """Validate the query and run the pre-filter over the records file."""
    query = parse_query_request(_read_json(query_path), config)
    records = load_records(records_path)
    return run_prefilter(records, query).to_dict()


def _load_pair(pair_path: str) -> Tuple[MatchInput, MatchInput]:
    data = _read_json(pair_path)
    return MatchInput.from_dict(data["trip_a"]), MatchInput.from_dict(data["trip_b"])


def run_match_command(pair_path: str, config: Dict[str, Any]) -> Dict[str, Any]:
    """Compute the reference match score for a pair of trips."""
    scorer = create_scorer_from_config(config)
    trip_a, trip_b = _load_pair(pair_path)
    return scorer.score(trip_a, trip_b).to_dict()


def run_verify_command(pair_path: str, backend_path: str, config: Dict[str, Any]) -> Dict[str, Any]:
    """Check a backend result against the reference score."""
    scorer = create_scorer_from_config(config)
    trip_a, trip_b = _load_pair(pair_path)
    tolerance = get_config_value(config, "evaluation.tolerance", 0)
    discrepancies = verify_backend_result(
        trip_a, trip_b, _read_json(backend_path), scorer=scorer, tolerance=tolerance
    )
    return {
        "accepted": not discrepancies,
        "discrepancies": [d.to_dict() for d in discrepancies],
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Trip matching engine")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH} if present)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    prefilter_parser = subparsers.add_parser("prefilter", help="Pre-filter trip records")
    prefilter_parser.add_argument("--records", type=str, required=True, help="JSON file of base64 records")
    prefilter_parser.add_argument("--query", type=str, required=True, help="JSON pre-filter request")

    match_parser = subparsers.add_parser("match", help="Compute the reference match score")
    match_parser.add_argument("--pair", type=str, required=True, help="JSON file with trip_a and trip_b")

    verify_parser = subparsers.add_parser("verify", help="Verify a backend result")
    verify_parser.add_argument("--pair", type=str, required=True, help="JSON file with trip_a and trip_b")
    verify_parser.add_argument("--backend", type=str, required=True, help="JSON backend result")

    args = parser.parse_args(argv)

    try:
        config = load_runtime_config(args.config)

        if args.command == "prefilter":
            result = run_prefilter_command(args.records, args.query, config)
        elif args.command == "match":
            result = run_match_command(args.pair, config)
        else:
            result = run_verify_command(args.pair, args.backend, config)

        print(json.dumps(result, indent=2))
        if args.command == "verify" and not result["accepted"]:
            return 1
        return 0
    except ValidationError as e:
        logger.error(f"Invalid request: {e}")
        return 2
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 3
    except Exception as e:
        logger.exception(f"Command failed with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
