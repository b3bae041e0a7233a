#!/usr/bin/env python3
"""
Command-line entrypoint.

Without a subcommand it runs the interactive provisioner: pick a model,
enter an instance count, and every instance is installed, configured and
started in turn. Subcommands cover the fleet helpers.
"""

import sys
import argparse
import logging
from typing import Callable, Optional

from gaianode.config import config
from gaianode.contracts import (
    KNOWN_MODELS,
    CUSTOM_SELECTION,
    InvalidSelectionError,
    ModelChoice,
    resolve_model,
)
from gaianode.provisioner import InstanceProvisioner
from gaianode import fleet
from gaianode.allocator import port_for
from gaianode.runner import ExecError

logger = logging.getLogger("Provisioner")


def print_menu():
    print("=" * 60)
    print("SELECT A MODEL CONFIGURATION")
    print("=" * 60)
    for key, model in KNOWN_MODELS.items():
        print(f"  {key}) {model.name}")
    print(f"  {CUSTOM_SELECTION}) Custom config URL")
    print("=" * 60)


def prompt_model(selection: Optional[str] = None, custom_url: Optional[str] = None,
                 ask: Callable[[str], str] = input) -> ModelChoice:
    if selection is None:
        print_menu()
        selection = ask("Enter your choice (1-5): ")
    if selection.strip() == CUSTOM_SELECTION and not custom_url:
        custom_url = ask("Enter the config URL: ").strip()
    return resolve_model(selection, custom_url)


def parse_count(raw: str) -> int:
    try:
        count = int(raw.strip())
    except ValueError:
        raise InvalidSelectionError(f"Invalid instance count: {raw!r}")
    if count < 1:
        raise InvalidSelectionError(f"Instance count must be at least 1, got {count}")
    return count


def prompt_count(count: Optional[int] = None, ask: Callable[[str], str] = input) -> int:
    if count is None:
        return parse_count(ask("How many instances do you want to create? "))
    return parse_count(str(count))


def exit_status(returncode: int) -> int:
    """Shell convention: a child killed by signal N exits 128 + N."""
    if returncode < 0:
        return 128 - returncode
    return returncode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gaianode",
        description="Provision and manage multiple GaiaNet node instances on this host"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command")

    provision = sub.add_parser("provision", help="Provision new instances (default)")
    for p, default in ((parser, None), (provision, argparse.SUPPRESS)):
        # SUPPRESS keeps flags given before the subcommand
        p.add_argument("--model", choices=[*KNOWN_MODELS, CUSTOM_SELECTION], default=default,
                       help="Model selection; prompts when omitted")
        p.add_argument("--config-url", default=default,
                       help="Config URL for a custom model (selection 5)")
        p.add_argument("--count", type=int, default=default,
                       help="Number of instances; prompts when omitted")

    sub.add_parser("start-all", help="Start every instance")
    sub.add_parser("stop-all", help="Stop every instance")
    sub.add_parser("ids", help="Print the Node ID and Device ID of every instance")
    sub.add_parser("status", help="Show which instance ports are listening")
    return parser


def run_provision(args, ask: Callable[[str], str] = input,
                  provisioner: Optional[InstanceProvisioner] = None) -> int:
    try:
        model = prompt_model(args.model, args.config_url, ask=ask)
        count = prompt_count(args.count, ask=ask)
    except InvalidSelectionError as e:
        print(f"Error: {e}")
        return 1

    provisioner = provisioner or InstanceProvisioner()
    instances = provisioner.provision(model, count)

    print("\nProvisioned instances:")
    for inst in instances:
        print(f"  {inst.number}: {inst.directory} (port {inst.port})")
    return 0


def run_ids() -> int:
    records = fleet.collect_ids(config.get_info_dir())
    if not records:
        print(f"No node info files found in {config.get_info_dir()}")
        return 0
    for record in records:
        print(f"{record.number}: Node ID {record.node_id or '-'}  Device ID {record.device_id or '-'}")
    return 0


def run_status() -> int:
    status = fleet.instance_status(config.get_home())
    if not status:
        print("No instances found")
        return 0
    for number, listening in status.items():
        marker = "✓" if listening else "✗"
        print(f"  {number} [{marker}] port {port_for(number)}")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.LOG_LEVEL),
        format=config.LOG_FORMAT,
        stream=sys.stdout
    )
    if args.verbose:
        config.print_config()

    try:
        if args.command == "start-all":
            fleet.start_all(config.get_home())
            return 0
        if args.command == "stop-all":
            fleet.stop_all(config.get_home())
            return 0
        if args.command == "ids":
            return run_ids()
        if args.command == "status":
            return run_status()
        return run_provision(args)
    except ExecError as e:
        logger.error(str(e))
        return exit_status(e.returncode)
    except KeyboardInterrupt:
        logger.warning("Interrupted; instances created so far are left in place")
        return 130
    except OSError as e:
        # URLError is an OSError subclass
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
