#!/usr/bin/env python3
"""
Command line entry point for the Roles2Library migrations
"""

import sys
import logging
import argparse

from .artifacts import ArtifactStore
from .chain import ChainClient
from .config import MigrationConfig, configure_logging
from .deployer import Deployer
from .errors import MigrationError
from .registry import DeploymentRegistry
from .runner import DEFAULT_PACKAGE, MigrationRunner, load_migrations

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="roles-migrate", description=__doc__)
    parser.add_argument("--network", help="network section in the deployment file (default: $NETWORK)")
    parser.add_argument("--deployment-file", help="deployment registry path (default: $DEPLOYMENT_FILE)")
    sub = parser.add_subparsers(dest="command")

    migrate = sub.add_parser("migrate", help="run pending migrations")
    migrate.add_argument("--from", dest="from_step", type=int, help="re-run starting at this step")
    migrate.add_argument("--to", dest="to_step", type=int, help="stop after this step")
    migrate.add_argument("--only", type=int, help="run this single step again, whatever the recorded progress")
    migrate.add_argument("--reset", action="store_true", help="run every step again from the first one")
    migrate.add_argument("--package", default=DEFAULT_PACKAGE, help="package holding the step modules")

    sub.add_parser("status", help="show deployed contracts and progress")

    register = sub.add_parser("register", help="record a contract deployed outside these migrations")
    register.add_argument("name")
    register.add_argument("address")
    return parser


def _registry(config: MigrationConfig) -> DeploymentRegistry:
    return DeploymentRegistry.load(config.deployment_file, config.network)


def cmd_migrate(config: MigrationConfig, args) -> int:
    registry = _registry(config)
    client = ChainClient.from_config(config)
    deployer = Deployer(client, registry, ArtifactStore(config.artifacts_dir),
                        aliases=config.aliases, options=config.options)
    runner = MigrationRunner(deployer, client.accounts(), load_migrations(args.package))

    if args.only is not None:
        runner.run_step(args.only)
        logger.info(f"Executed migration: {args.only}")
        return 0

    if args.reset:
        registry.reset_progress()
    executed = runner.run(from_step=args.from_step, to_step=args.to_step)
    logger.info(f"Executed migrations: {executed or 'none'}")
    return 0


def cmd_status(config: MigrationConfig, args) -> int:
    registry = _registry(config)
    print(f"Network: {registry.network}")
    print(f"Last completed migration: {registry.last_completed}")
    for name, address in sorted(registry.contracts.items()):
        print(f"  {name}: {address}")
    return 0


def cmd_register(config: MigrationConfig, args) -> int:
    registry = _registry(config)
    registry.register(args.name, args.address)
    registry.save()
    return 0


COMMANDS = {
    "migrate": cmd_migrate,
    "status": cmd_status,
    "register": cmd_register,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = MigrationConfig.from_env()
    except MigrationError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1
    if args.network:
        config.network = args.network
    if args.deployment_file:
        config.deployment_file = args.deployment_file
    configure_logging(config.log_file)

    if args.command is None:
        args.command = "migrate"
        args.from_step = args.to_step = args.only = None
        args.reset = False
        args.package = DEFAULT_PACKAGE
    command = COMMANDS[args.command]

    try:
        return command(config, args)
    except MigrationError as e:
        logger.error(f"Migration aborted: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Migration stopped by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
