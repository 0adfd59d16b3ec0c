import argparse
import logging

from study_planner.api import run_api_server
from study_planner.core.config import Config
from study_planner.core.logging_setup import setup_basic_logging, setup_logging


def main(argv=None):
    # Setup basic logging
    setup_basic_logging()

    # Parse command line arguments
    parser = argparse.ArgumentParser(description='Study Planner API server')
    parser.add_argument('--config',
                        help='Path to config file (default: ./config.yaml)')
    parser.add_argument('--host', help='Bind address (overrides api.host)')
    parser.add_argument('--port', type=int, help='Port (overrides api.port)')

    args = parser.parse_args(argv)
    config_path = args.config if args.config else "config.yaml"

    config = Config(config_path=config_path)
    setup_logging(config.get_section("logging"))
    logging.info("Study planner starting...")

    run_api_server(config, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
