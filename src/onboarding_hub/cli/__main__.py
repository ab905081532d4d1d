"""
Unified CLI entry point for OnboardingHub.

Usage:
    python -m onboarding_hub.cli <command> [options]

Available commands:
    extract  - Write per-company registration bundles as JSON (no database)
    seed     - Load the workbook into the configured database

Examples:
    # Registration bundles with reproducible codes
    python -m onboarding_hub.cli extract --excel data/onboarding.xlsx \
        --output out/registrations.json --seed 42

    # Preview a seed run without writing
    python -m onboarding_hub.cli seed --excel data/onboarding.xlsx --dry-run

    # Seed, refusing to write when any row could not be linked
    python -m onboarding_hub.cli seed --excel data/onboarding.xlsx --strict \
        --report logs/onboarding_issues.csv
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from onboarding_hub.utils.logging import get_logger

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="onboarding_hub.cli",
        description="OnboardingHub CLI - onboarding workbook extraction and seeding",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
        help="Command to execute",
    )

    extract_parser = subparsers.add_parser(
        "extract",
        help="Write registration bundles as JSON",
        description="Link the workbook and write one registration bundle per company",
    )
    extract_parser.add_argument("--excel", required=True, help="Onboarding workbook")
    extract_parser.add_argument("--output", required=True, help="JSON output path")
    extract_parser.add_argument("--report", help="Optional CSV path for the issue report")
    extract_parser.add_argument(
        "--seed", type=int, default=None, help="Seed for reproducible codes"
    )

    seed_parser = subparsers.add_parser(
        "seed",
        help="Load the workbook into the database",
        description="Insert all onboarding collections in one transaction",
    )
    seed_parser.add_argument("--excel", required=True, help="Onboarding workbook")
    seed_parser.add_argument(
        "--dry-run", action="store_true", help="Build records but write nothing"
    )
    seed_parser.add_argument(
        "--strict",
        action="store_true",
        help="Abort before writing when any row was dropped",
    )
    seed_parser.add_argument("--report", help="Optional CSV path for the issue report")

    return parser


def _print_report_summary(report) -> None:
    counts = report.counts()
    print("Issues: " + ", ".join(f"{name}={count}" for name, count in counts.items()))


def _run_extract(args: argparse.Namespace) -> int:
    from onboarding_hub.config import get_settings, load_sheet_mapping_config
    from onboarding_hub.domain.onboarding.bundles import build_registration_bundles
    from onboarding_hub.domain.onboarding.service import build_onboarding_batches
    from onboarding_hub.domain.onboarding.synthesizer import (
        CodeGenerator,
        InMemoryCodeRegistry,
        InMemoryOrganizationDirectory,
    )
    from onboarding_hub.io.readers import ExcelReader

    settings = get_settings()
    seed = args.seed if args.seed is not None else settings.code_seed

    sheets = ExcelReader().read_workbook(args.excel)
    result = build_onboarding_batches(
        sheets,
        mapping_config=load_sheet_mapping_config(Path(settings.sheet_mappings_config)),
        organizations=InMemoryOrganizationDirectory(),
        code_registry=InMemoryCodeRegistry(),
        code_generator=CodeGenerator(seed=seed),
        now=datetime.now(timezone.utc),
        settings=settings,
    )

    bundles = build_registration_bundles(result.batches)
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(bundles, f, ensure_ascii=False, indent=2)

    if args.report:
        result.report.export_to_csv(Path(args.report))

    print(f"✅ Wrote {len(bundles)} registration bundle(s) to {output}")
    _print_report_summary(result.report)
    return 0


def _run_seed(args: argparse.Namespace) -> int:
    from onboarding_hub.domain.onboarding.service import run_onboarding
    from onboarding_hub.infrastructure.validation import IncompleteExtractionError

    try:
        result = run_onboarding(args.excel, dry_run=args.dry_run, strict=args.strict)
    except IncompleteExtractionError as e:
        if args.report:
            e.report.export_to_csv(Path(args.report))
        print(f"❌ {e}; nothing written", file=sys.stderr)
        return 1

    if args.report:
        result.report.export_to_csv(Path(args.report))

    counts = result.batches.counts()
    mode = "Dry run" if args.dry_run else "Seeded"
    print(f"✅ {mode}: {sum(counts.values())} record(s)")
    for name, count in counts.items():
        print(f"   {name}: {count}")
    _print_report_summary(result.report)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point with subcommand routing.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "extract":
            return _run_extract(args)
        if args.command == "seed":
            return _run_seed(args)
    except KeyboardInterrupt:
        print("\n\n❌ Operation cancelled by user")
        return 130
    except Exception as e:
        logger.error("cli.command_failed", command=args.command, error=str(e))
        print(f"\n❌ {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
