import argparse

def get_base_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Upload podcast episodes to a media server")
    parser.add_argument("-e", "--env-file", help="Path to a custom .env file", default=None)
    return parser

def add_log_level_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-l", "--log-level", help="Set log level (DEBUG, INFO, WARNING, ERROR)", default="INFO")

def add_config_file_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config-file", help="Path to the JSON show configuration file", default=None)
