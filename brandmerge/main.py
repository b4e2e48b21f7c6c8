import argparse
import logging
import sys
from typing import List, Optional

from .errors import BrandMergeError
from .models import MergeOptions
from .pipeline import run_merge
from .schema import DEFAULT_REVISION, REVISIONS
from .selftest import run_self_test
from .writer import print_report

logger = logging.getLogger("brandmerge")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brandmerge",
        description="Merge brand, source and verification CSV exports into brands.json",
    )
    parser.add_argument("--brands", help="Brand facts CSV (required unless --self-test)")
    parser.add_argument("--sources", help="Source URLs CSV (required unless --self-test)")
    parser.add_argument("--verifications", help="Verification events CSV")
    parser.add_argument("--out", help="Output JSON path (required unless --self-test)")
    parser.add_argument("--dry-run", action="store_true", help="Write to a .temp- file next to --out")
    parser.add_argument("--strict", action="store_true", help="Exit non-zero on any warning")
    parser.add_argument("--brand-key", help="Column joining sources/verifications to brands")
    parser.add_argument("--self-test", action="store_true", help="Run the normalizer checks and exit")
    parser.add_argument(
        "--schema-revision",
        choices=sorted(REVISIONS),
        default=DEFAULT_REVISION,
        help=f"Brand schema revision (default: {DEFAULT_REVISION})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    return parser


def setup_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    options = MergeOptions(**vars(args))
    setup_logging(options.verbose)

    if options.self_test:
        return run_self_test()

    try:
        _, report = run_merge(options)
    except BrandMergeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print_report(report)
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
