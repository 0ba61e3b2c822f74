import argparse

import uvicorn

from constants import HOST, LOG_FILE, LOG_LEVEL, PORT, RELOAD
from logging_config import get_logger, setup_logging


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the watch party coordinator")
    parser.add_argument("--host", default=HOST, help=f"bind address (default {HOST})")
    parser.add_argument("--port", type=int, default=PORT, help=f"bind port (default {PORT})")
    parser.add_argument("--reload", action="store_true", default=RELOAD, help="restart on code changes")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    parser.add_argument("--log-file", default=LOG_FILE)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(log_level=args.log_level, log_file=args.log_file)
    logger = get_logger(__name__)
    logger.info(f"Starting watch party server on {args.host}:{args.port} (reload={args.reload})")
    uvicorn.run("app:app", host=args.host, port=args.port, reload=args.reload, log_config=None)


if __name__ == "__main__":
    main()
