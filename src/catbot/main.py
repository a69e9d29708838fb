#!/usr/bin/env python3
"""
catbot - Main Entry Point

Usage:
    catbot                  # Run robot controller
    catbot --web            # Also serve the remote control interface
"""

import argparse
import asyncio
import logging
import sys

from catbot.config import BOARD_PORT, LOG_FILE, LOG_FORMAT, WEB_PORT


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="catbot rover controller")
    parser.add_argument(
        "--web",
        action="store_true",
        help="Enable remote control web interface",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=WEB_PORT,
        help="Web interface port",
    )
    parser.add_argument(
        "--board-port",
        default=BOARD_PORT,
        help="Serial port of the microcontroller board",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument(
        "--log-file",
        default=LOG_FILE,
        help="Log file (empty to disable)",
    )
    args = parser.parse_args()

    # Setup logging
    handlers = [logging.StreamHandler()]
    if args.log_file:
        handlers.append(logging.FileHandler(args.log_file))
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format=LOG_FORMAT,
        handlers=handlers,
    )

    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("catbot starting...")

    from catbot.control import Controller

    controller = Controller(
        board_port=args.board_port,
        web=args.web,
        web_port=args.port,
    )
    sys.exit(asyncio.run(controller.run()))


if __name__ == "__main__":
    main()
