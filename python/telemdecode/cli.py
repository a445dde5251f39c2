"""telemdecode command-line tool."""

from __future__ import annotations

import argparse
import logging
import sys

from .decoder import decode_dump, output_path_for


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="telemdecode",
        description="Decode a flight computer state vector dump to CSV")
    parser.add_argument("file", help="Path to the raw telemetry dump")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO,
                        format="%(name)s: %(message)s")

    try:
        result = decode_dump(args.file, output_path_for(args.file))
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Decoded {result.count} telemetry packets")
    return 0


if __name__ == "__main__":
    sys.exit(main())
