"""
marathon-deployer CLI entry point.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from marathon_deployer.config.settings import DeployerConfig
from marathon_deployer.deployment.orchestrator import run_deploy
from marathon_deployer.exceptions import (
    EXIT_ERROR,
    EXIT_INVALID_CONFIG,
    EXIT_SUCCESS,
    ConfigurationError,
    DeployerError,
)
from marathon_deployer.logging_config import setup_logging

DEFAULT_CONFIG_PATH = "marathon-deployer.yml"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="marathon-deployer",
        description="Deploy an app to Marathon and wait until it has rolled out",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Deploy target/marathon.json and wait for the rollout
  marathon-deployer deploy --marathon-host http://marathon.mesos:8080

  # Fire and confirm acceptance only
  marathon-deployer deploy --marathon-host http://marathon.mesos:8080 \\
      --no-wait-for-successful-deployment

  # Generate a default config
  marathon-deployer generate-config --config marathon-deployer.yml
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    config_help = f"Path to YAML configuration file (default: {DEFAULT_CONFIG_PATH})"

    deploy_parser = subparsers.add_parser("deploy", help="Create or update an app and wait")
    deploy_parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH, help=config_help)
    deploy_parser.add_argument("--marathon-host", help="Marathon base URL")
    deploy_parser.add_argument(
        "--marathon-config-file", help="App descriptor (default: target/marathon.json)"
    )
    deploy_parser.add_argument(
        "--wait-on-running-deployment",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Wait for a previous deployment of the app to finish (default: on)",
    )
    deploy_parser.add_argument(
        "--wait-on-running-deployment-timeout",
        type=int,
        metavar="SECONDS",
        help="Max seconds to wait for the previous deployment (default: 300)",
    )
    deploy_parser.add_argument(
        "--wait-for-successful-deployment",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Wait until the new version is rolled out and healthy (default: on)",
    )
    deploy_parser.add_argument(
        "--wait-for-successful-deployment-timeout",
        type=int,
        metavar="SECONDS",
        help="Max seconds per instance to wait for the new version (default: 300)",
    )
    deploy_parser.add_argument("--poll-interval", type=float, metavar="SECONDS")
    deploy_parser.add_argument("--initial-delay", type=float, metavar="SECONDS")
    deploy_parser.add_argument(
        "--version-check",
        choices=["strict", "tolerant"],
        help="Abort when the new version disappears (strict) or wait for the timeout (tolerant)",
    )
    deploy_parser.add_argument(
        "--force", action="store_true", default=None, help="Force the update in Marathon"
    )
    deploy_parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    deploy_parser.add_argument("--log-file", help="Also write logs to this rotating file")
    deploy_parser.add_argument(
        "--json-logs", action="store_true", default=None, help="Write the log file as JSON"
    )

    generate_parser = subparsers.add_parser(
        "generate-config", help="Generate default configuration file and exit"
    )
    generate_parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH, help=config_help)

    validate_parser = subparsers.add_parser(
        "validate-config", help="Validate configuration file and exit"
    )
    validate_parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH, help=config_help)

    return parser


def load_config(args: argparse.Namespace) -> DeployerConfig:
    """Merge file, environment and command-line settings."""
    config = DeployerConfig.from_file(args.config).apply_env_overrides()

    overrides = {
        (config.marathon, "host"): args.marathon_host,
        (config.descriptor, "path"): args.marathon_config_file,
        (config.deployment, "wait_on_running_deployment"): args.wait_on_running_deployment,
        (
            config.deployment,
            "wait_on_running_deployment_timeout_in_sec",
        ): args.wait_on_running_deployment_timeout,
        (config.deployment, "wait_for_successful_deployment"): args.wait_for_successful_deployment,
        (
            config.deployment,
            "wait_for_successful_deployment_timeout_in_sec",
        ): args.wait_for_successful_deployment_timeout,
        (config.deployment, "poll_interval"): args.poll_interval,
        (config.deployment, "initial_delay"): args.initial_delay,
        (config.deployment, "version_check"): args.version_check,
        (config.deployment, "force"): args.force,
        (config.logging, "log_file"): args.log_file,
        (config.logging, "use_json"): args.json_logs,
    }
    for (section, field), value in overrides.items():
        if value is not None:
            setattr(section, field, value)

    if args.verbose:
        config.logging.console_level = "DEBUG"

    # Re-validate the merged values
    try:
        return DeployerConfig.model_validate(config.model_dump())
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def handle_deploy(args: argparse.Namespace) -> int:
    """Run a deployment and map the outcome to an exit code."""
    try:
        config = load_config(args)
    except ConfigurationError as e:
        print(f"Configuration invalid: {e}", file=sys.stderr)
        return e.exit_code

    setup_logging(
        console_level=config.logging.console_level,
        log_file=config.logging.log_file,
        use_json=config.logging.use_json,
    )
    logger = logging.getLogger(__name__)

    try:
        report = asyncio.run(run_deploy(config))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return EXIT_ERROR
    except DeployerError as e:
        logger.error(f"Deployment failed: {e}")
        return e.exit_code
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return EXIT_ERROR

    if report.converged:
        logger.info(
            f"Deployed {report.app_id} version {report.version} "
            f"({report.instances} instance(s)) in {report.elapsed:.1f}s"
        )
    else:
        logger.info(f"Marathon accepted {report.app_id} version {report.version}")
    return EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "deploy":
        return handle_deploy(args)

    if args.command == "generate-config":
        DeployerConfig().save(args.config)
        print(f"Generated default configuration at: {args.config}")
        return EXIT_SUCCESS

    if args.command == "validate-config":
        try:
            config = DeployerConfig.from_file(args.config).apply_env_overrides()
            config.validate_for_deploy()
        except ConfigurationError as e:
            print(f"Configuration invalid: {e}")
            return EXIT_INVALID_CONFIG
        print(f"Configuration valid: {args.config}")
        return EXIT_SUCCESS

    parser.print_help()
    return EXIT_INVALID_CONFIG


if __name__ == "__main__":
    sys.exit(main())
