"""
Command line entry point.

Reads vote commands from stdin, one per line, until end of input or the
first empty line, then prints the tally sorted by votes::

    $ printf 'Alice pick Pizza\\nBob delegate Alice\\n' | liquid-democracy --open
"""
import argparse
import sys
import time
from typing import List, Optional, TextIO, Tuple

from liquid_democracy.config import CLI_LOG_LEVEL, LOG_FILE
from liquid_democracy.services.commands import apply_command, read_commands
from liquid_democracy.services.democracy import LiquidDemocracy
from liquid_democracy.services.reporting import format_open_votes, format_results
from liquid_democracy.utils import get_logger, log_performance, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="liquid-democracy",
        description="Tally liquid democracy votes read from stdin "
        "('<voter> pick <alternative>' or '<voter> delegate <voter>').",
    )
    parser.add_argument("--open", action="store_true", help="Also list every voter's resulting choice")
    parser.add_argument(
        "--log-level",
        default=CLI_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Diagnostic log level (logs go to stderr)",
    )
    return parser


def tally_stream(
    democracy: LiquidDemocracy, stdin: TextIO, stderr: TextIO
) -> Tuple[bool, Optional[Exception]]:
    """Apply every command read from ``stdin``.

    Returns whether any line was skipped, and the error that stopped reading
    early (``None`` when input ended normally). Votes applied before the
    error are kept.
    """
    warned = False
    try:
        for line, command in read_commands(stdin):
            if not command.is_valid:
                stderr.write(f'[Warning] Invalid line, skip this line ("{line}").\n')
                logger.debug("Skipped invalid line", line=line)
                warned = True
                continue
            apply_command(democracy, command)
    except (OSError, UnicodeDecodeError) as e:
        return warned, e
    return warned, None


def main(
    argv: Optional[List[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    args = build_parser().parse_args(argv)
    setup_logging(log_level=args.log_level, log_file=LOG_FILE, stream=stderr)

    # Undecodable bytes become U+FFFD instead of aborting the read.
    reconfigure = getattr(stdin, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(errors="replace")

    democracy = LiquidDemocracy()
    exit_code = 0
    start_time = time.time()

    warned, error = tally_stream(democracy, stdin, stderr)
    if error is not None:
        # Report, then still print whatever was read so far.
        stderr.write(f"[Error] Unexpected error: {error}\n")
        logger.error("Reading votes failed", error=str(error))
        exit_code = 1

    if warned:
        stdout.write("\n")

    result = democracy.results()
    stdout.write(format_results(result))

    if args.open:
        stdout.write(format_open_votes(democracy.resulting_choices()))

    log_performance(
        operation="cli_tally",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"voters": result.total, "invalid": result.invalid_vote_count},
    )
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
