"""Command-line entry point: ``chatrelay [--config PATH] [--debug]``."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from chatrelay import __version__
from chatrelay.config import ConfigError, RelayConfig, debug_enabled, load_config
from chatrelay.daemon import RelayDaemon
from chatrelay.loader import StartupError, load
from chatrelay.logging_config import setup_logging

logger = logging.getLogger("chatrelay")

EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatrelay",
        description="Relay chat messages through sandboxed plugins.",
    )
    parser.add_argument("-c", "--config", type=Path, help="config file (default: relay.yml or relay.yaml)")
    parser.add_argument("--debug", action="store_true", help="debug logging (also DEBUG=1)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


async def serve(config: RelayConfig) -> None:
    adapters, plugins = await load(config)
    daemon = RelayDaemon(adapters, plugins)
    try:
        await daemon.run()
    except (asyncio.CancelledError, KeyboardInterrupt):
        # SIGINT arrived outside the daemon's signal handlers
        await daemon.teardown()
        raise


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()
    setup_logging("DEBUG" if args.debug or debug_enabled() else "INFO")

    try:
        config = load_config(args.config)
        asyncio.run(serve(config))
    except (ConfigError, StartupError) as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted before the relay was running")
        return EXIT_INTERRUPTED
    return 0


if __name__ == "__main__":
    sys.exit(main())
