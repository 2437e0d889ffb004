"""
Derive model variables for one patient file and print the result envelope.

Usage:
    python scripts/run_derive.py client_rawdata/2295117.txt
    python scripts/run_derive.py client_rawdata/2295117.xml --compare HMC_with_demo.csv --id 2295117
    python scripts/run_derive.py derive.yaml

A ``.yaml`` / ``.yml`` argument is treated as a derive.yaml config (source,
table and optional comparison). Anything else is a raw record file.

The envelope printed on stdout is JSON:
    {"error": ..., "error_code": ..., "error_detail": ..., "data": {...}}
The exit status is 0 on success and 1 when derivation failed, the
comparison found differences, or a config, table or reference sheet
could not be loaded. Load errors are logged and print no envelope.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_derive")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0].strip())
    parser.add_argument("path", help="Raw record (.xml / .txt) or derive.yaml")
    parser.add_argument("--table", help="Field specification YAML (default: built-in)")
    parser.add_argument("--compare", metavar="REF", help="Reference sheet (.csv / .parquet)")
    parser.add_argument("--id", dest="record_id", help="Patient id column in the reference sheet")
    args = parser.parse_args(argv)
    if args.compare and not args.record_id:
        parser.error("--compare requires --id")
    return args


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    import pydantic

    import checkup_derive
    from checkup_derive.compare import compare_outputs
    from checkup_derive.exceptions import CheckupDeriveError

    args = _parse_args(argv)
    path = Path(args.path)

    report = None
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            result = checkup_derive.run_config(path)
            outcome, report = result.outcome, result.report
        else:
            table = checkup_derive.load_table(args.table) if args.table else None
            outcome = checkup_derive.process_file(path, table)
            if args.compare and outcome.ok:
                report = compare_outputs(args.compare, args.record_id, outcome.outputs)
    except (CheckupDeriveError, FileNotFoundError, pydantic.ValidationError) as exc:
        log.error("%s", exc)
        return 1

    print(json.dumps(outcome.to_dict(), ensure_ascii=False, indent=2))

    if not outcome.ok:
        log.error("%s %s: %s", outcome.code.value, outcome.message, outcome.detail)
        return 1
    if report is not None:
        log.info(report.summary())
        if not report.ok:
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
