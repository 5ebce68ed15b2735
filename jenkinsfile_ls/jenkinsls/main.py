"""jenkinsfile-ls entrypoint -- load config, build the Jenkins client, serve LSP on stdio."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from jenkinsls import __version__
from jenkinsls.config import Config, default_config_path, load_config
from jenkinsls.errors import ConfigError
from jenkinsls.jenkins.client import JenkinsClient
from jenkinsls.server import create_server

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STARTUP_FAILURE = 1


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="jenkinsfile-ls",
        description="Language server validating Jenkinsfiles against a Jenkins controller",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a TOML config file (environment variables take precedence)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write logs to this file instead of stderr",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Log level (default: INFO)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def _configure_logging(level: str, log_file: Path | None) -> None:
    # stdout carries the LSP stream, so logs never go there.
    handlers: list[logging.Handler] = []
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file))
    else:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=handlers,
        force=True,
    )


def _config_help() -> str:
    return "\n".join(
        [
            "",
            "Please set the following environment variables:",
            "  JENKINS_URL         - Jenkins instance URL (e.g., https://jenkins.example.com)",
            "  JENKINS_USER_ID     - Jenkins username",
            "  JENKINS_API_TOKEN   - Jenkins API token",
            "",
            "Optional:",
            "  JENKINS_INSECURE    - Set to '1' or 'true' to skip TLS verification",
            "",
            f"Or create a config file at: {default_config_path()}",
        ]
    )


def build_client(config_path: Path | None = None) -> JenkinsClient:
    """Load configuration and construct the Jenkins client.

    Raises ConfigError for configuration problems and OSError/ValueError when
    the HTTP client cannot be built (e.g. unreadable CA bundle).
    """
    config: Config = load_config(config_path)
    logger.info("Configuration loaded: %s", config.redacted())
    client = JenkinsClient(config)
    logger.info("Jenkins client initialized for %s", client.base_url)
    return client


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.log_level, args.log_file)

    logger.info("Starting jenkinsfile-ls v%s", __version__)

    try:
        client = build_client(args.config)
    except ConfigError as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        print(_config_help(), file=sys.stderr)
        return EXIT_STARTUP_FAILURE
    except (OSError, ValueError) as e:
        print(f"Failed to initialize Jenkins client: {e}", file=sys.stderr)
        return EXIT_STARTUP_FAILURE

    server = create_server(client)
    logger.info("LSP server starting on stdio")
    server.start_io()
    logger.info("LSP server shutting down")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
