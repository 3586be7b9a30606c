from __future__ import annotations

import logging
import sys
from typing import List, Optional

from universal_block_cli.core.handlers.convert_handler import parse_args, run_convert
from universal_block_cli.core.managers.config_manager import config_manager
from universal_block_cli.core.utils.configure_logging import configure_logger

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the `universal-block` command."""
    args = list(sys.argv[1:] if argv is None else argv)

    # Overrides first, so --set debug.level=... reaches the logger setup
    pargs, code = parse_args(args)
    if pargs is None:
        return code

    level = "DEBUG" if pargs.verbose else config_manager.get_nested("debug.level", "WARNING")
    configure_logger(level)
    logger.debug("universal-block started with args: %s", args)

    return run_convert(pargs)


if __name__ == "__main__":
    sys.exit(main())
