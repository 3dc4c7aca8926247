"""Command line diagnostics for a notebook.

Usage: python -m chat_relay.cli diagnose <notebook_id> [--pretty]
"""

import argparse
import json
import sys
from typing import List, Optional

from chat_relay.config import Settings, settings
from chat_relay.database import SessionLocal, get_engine
from chat_relay.logging_config import get_logger, setup_logging
from chat_relay.services.diagnostics_service import STATUS_HEALTHY, diagnose

logger = get_logger("cli")

EXIT_HEALTHY = 0
EXIT_ISSUES_FOUND = 1
EXIT_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Notebook chat relay tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    diagnose_parser = subparsers.add_parser("diagnose", help="Check a notebook's chat dependencies")
    diagnose_parser.add_argument("notebook_id", help="Notebook ID (chat session id)")
    diagnose_parser.add_argument("--pretty", action="store_true", help="Indent the JSON report")
    return parser


def run_diagnose(notebook_id: str, config: Settings, pretty: bool = False) -> int:
    db = SessionLocal(bind=get_engine(config))
    try:
        report = diagnose(db, notebook_id, config)
    except Exception as e:
        logger.error("Diagnostics failed", exc_info=True)
        print(json.dumps({"error": str(e) or "Diagnostics failed"}))
        return EXIT_FAILED
    finally:
        db.close()

    print(json.dumps(report, indent=2 if pretty else None, ensure_ascii=False, default=str))
    return EXIT_HEALTHY if report["overallStatus"] == STATUS_HEALTHY else EXIT_ISSUES_FOUND


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    # stdout carries the report.
    setup_logging(settings.log_level, stream=sys.stderr)

    if args.command == "diagnose":
        return run_diagnose(args.notebook_id, settings, pretty=args.pretty)
    return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
