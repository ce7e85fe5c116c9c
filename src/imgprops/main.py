"""Command line entry point: print the decoded metadata of image files as JSON."""

import argparse
import sys
from collections.abc import Sequence

from imgprops.app import App
from imgprops.config import Config
from imgprops.logging import setup_logging


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="imgprops", description="Decode image metadata property items.")
    parser.add_argument("files", nargs="+", help="Image files to read")
    parser.add_argument(
        "-t",
        "--tag",
        dest="tags",
        action="append",
        default=[],
        help="Tag id (decimal or 0x hex), name or wildcard pattern; repeatable",
    )
    parser.add_argument("--no-derived", action="store_true", default=None, help="Skip *PS entries and the file-object row")
    parser.add_argument("--include-unknown", action="store_true", default=None, help="Emit tags missing from the tag table")
    parser.add_argument("--skip-faulty", action="store_true", default=None, help="Drop entries that fail to decode")
    parser.add_argument("--attach", action="store_true", help="Print one tag name -> value object per file")
    parser.add_argument("--debug", action="store_true", help="Verbose console logging")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    config = Config()
    setup_logging(config.debug or args.debug)
    app = App(config)
    options = app.options(
        tag_selectors=args.tags,
        suppress_derived=args.no_derived,
        include_unknown=args.include_unknown,
        skip_faulty=args.skip_faulty,
    )

    for path in args.files:
        if args.attach:
            sys.stdout.write(app.read_properties(path, options).model_dump_json() + "\n")
        else:
            for view in app.read_views(path, options):
                sys.stdout.write(view.model_dump_json() + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
