"""Command-line entrypoint for exporting registry message schemas."""

from __future__ import annotations

import argparse
from pathlib import Path

from .schema import write_schemas


def main(argv: list[str] | None = None) -> int:
    """Write JSON Schemas for registry messages to a directory.

    Parameters
    ----------
    argv : list[str] | None, optional
        Command-line arguments. ``None`` defaults to ``sys.argv``.

    Returns
    -------
    int
        Exit code, always 0 on success.

    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "out_dir",
        type=Path,
        nargs="?",
        default=Path("schema"),
        help="Directory that receives the schema files (default: ./schema)",
    )
    args = parser.parse_args(argv)

    written = write_schemas(args.out_dir)
    for path in written:
        print(f"wrote {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
