#!/usr/bin/env python3
# cipherkeep/__main__.py
from __future__ import annotations

"""Entry point: boot, then read-eval-print until exit."""

import logging
import sys

from cipherkeep.boot import boot_sequence
from cipherkeep.errors import InsecurePermissions
from cipherkeep.interface import HELP_TEXT, make_cli, run_command
from cipherkeep.ui import colorize, print_line

logger = logging.getLogger("cipherkeep")

EXIT_INSECURE = 2


def repl(state) -> int:
    ctx = state.context
    print_line(HELP_TEXT)
    try:
        with make_cli(ctx) as cli:
            while True:
                try:
                    line = cli.get_line()
                except KeyboardInterrupt:
                    continue
                except EOFError:
                    print_line()
                    return 0
                output, ok = run_command(line, ctx)
                if output:
                    print_line(output if ok else colorize(output, "red"))
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0
    finally:
        ctx.session.lock()


def main() -> int:
    try:
        state = boot_sequence()
        return repl(state)
    except InsecurePermissions as exc:
        print_line(colorize(f"[fatal] {exc}", "red"), file=sys.stderr)
        return EXIT_INSECURE
    except ValueError as exc:
        # invalid configuration
        print_line(colorize(f"[fatal] {exc}", "red"), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
