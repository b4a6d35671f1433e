"""
cli.py

Responsibility: CLI entrypoint for fieldbuilder.

Single command `show`:
1) Validate the target package prefix and module name
2) Render the embedded module (or its conformance test)
3) Print it to stdout

Rendering lives in `embed.py`; this module only parses arguments and
reports errors.
"""

from __future__ import annotations

import argparse
import logging
import sys

from fieldbuilder import __version__
from fieldbuilder.embed import DEFAULT_MODULE, EmbedError, RenderError, render_conformance_test, render_module


def show_cmd(args: argparse.Namespace) -> int:
    if args.test:
        text = render_conformance_test(args.prefix, args.module)
    else:
        text = render_module(args.prefix, args.module)
    sys.stdout.write(text)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="fieldbuilder", description="fieldbuilder - accessor generation for dict-backed classes")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("show", help="Print the embeddable field builder module for a package prefix")
    s.add_argument("prefix", help="Dotted package path the module will live under (e.g. myproject.util)")
    s.add_argument("--module", default=DEFAULT_MODULE, help=f"Module name inside the prefix (default: {DEFAULT_MODULE})")
    s.add_argument("--test", action="store_true", help="Print the conformance test instead of the module")

    s.set_defaults(func=show_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        return int(args.func(args))
    except (EmbedError, RenderError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
