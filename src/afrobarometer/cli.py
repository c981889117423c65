from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from afrobarometer.config import APP_NAME, APP_VERSION, AFRB_DATA_DIR, SUPPORTED_ROUNDS
from afrobarometer.core.builder import build
from afrobarometer.core.data_dir import afrb_dir
from afrobarometer.core.errors import AfrobarometerError
from afrobarometer.core.store import list_built_rounds, read_round

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=APP_NAME, description="Build and read a local Afrobarometer store.")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
    parser.add_argument(
        "--data-dir",
        default=AFRB_DATA_DIR or None,
        help="Cache root (default: $AFRB_DATA_DIR, else a temporary directory).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages.")

    sub = parser.add_subparsers(dest="command", required=True)

    p_init = sub.add_parser("init", help="Create the data directory layout.")
    p_init.add_argument("path", nargs="?", help="Cache root (overrides --data-dir).")

    p_build = sub.add_parser("build", help="Download, merge and store survey rounds.")
    p_build.add_argument(
        "--rounds",
        type=int,
        nargs="+",
        default=list(SUPPORTED_ROUNDS),
        help=f"Rounds to build (default: {' '.join(map(str, SUPPORTED_ROUNDS))}).",
    )
    p_build.add_argument("--overwrite", action="store_true", help="Replace existing build output.")

    sub.add_parser("list", help="List built rounds.")

    p_show = sub.add_parser("show", help="Print the first rows of a built round.")
    p_show.add_argument("round", type=int)
    p_show.add_argument("--rows", type=int, default=5)

    return parser


def run_cli(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[afrb] %(levelname)s %(message)s",
    )

    try:
        if args.command == "init" and args.path:
            data_dir = afrb_dir(args.path)
        else:
            data_dir = afrb_dir(args.data_dir)

        if args.command == "build":
            report = build(rounds=args.rounds, overwrite=args.overwrite, data_dir=data_dir)
            for r in report.results:
                print(f"round {r.round}: {r.rows} rows, {r.columns} columns -> {r.path}")
        elif args.command == "list":
            built = list_built_rounds(data_dir)
            if not built:
                print(f"No rounds built in {data_dir.build}")
            for b in built:
                print(f"round {b.round}\t{b.size_bytes}\t{b.path}")
        elif args.command == "show":
            df = read_round(args.round, data_dir)
            print(df.head(args.rows).to_string())
            print(f"[{len(df)} rows x {len(df.columns)} columns]")
        else:
            print(data_dir.root)
    except (AfrobarometerError, ValueError, OSError) as exc:
        logger.error("%s", exc)
        return 1

    return 0
