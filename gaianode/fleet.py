"""
Operations over every instance already on this host.

Covers starting and stopping all instances, collecting the Node and Device
IDs from the saved info files, and checking which instance ports are
listening.
"""

import re
import logging
from pathlib import Path
from typing import List, Dict, Optional, Set

import psutil

from gaianode.allocator import discover_instances
from gaianode.contracts import Instance, InfoRecord
from gaianode.runner import CommandRunner, NodeCLI

logger = logging.getLogger("Fleet")

_INFO_FILE = re.compile(r"^node_info_(\d+)\.txt$")


def start_all(home: Path, runner: Optional[CommandRunner] = None) -> List[Instance]:
    """Start every instance in ascending order. Stops at the first failure."""
    runner = runner or CommandRunner()
    instances = discover_instances(home)
    for instance in instances:
        logger.info(f"Starting instance {instance.number} (port {instance.port})")
        NodeCLI(instance, runner).start()
    logger.info(f"Started {len(instances)} instance(s)")
    return instances


def stop_all(home: Path, runner: Optional[CommandRunner] = None) -> List[Instance]:
    """Stop every instance in ascending order. Stops at the first failure."""
    runner = runner or CommandRunner()
    instances = discover_instances(home)
    for instance in instances:
        logger.info(f"Stopping instance {instance.number}")
        NodeCLI(instance, runner).stop()
    logger.info(f"Stopped {len(instances)} instance(s)")
    return instances


def collect_ids(info_dir: Path) -> List[InfoRecord]:
    """Parse every saved info file, sorted by instance number."""
    if not info_dir.is_dir():
        return []

    records = []
    for path in info_dir.iterdir():
        match = _INFO_FILE.match(path.name)
        if not match:
            continue
        record = InfoRecord.parse(int(match.group(1)), path.read_text())
        if record.node_id is None:
            logger.warning(f"No Node ID found in {path}")
        records.append(record)
    return sorted(records, key=lambda r: r.number)


def listening_ports() -> Set[int]:
    ports = set()
    for conn in psutil.net_connections(kind="inet"):
        if conn.status == psutil.CONN_LISTEN and conn.laddr:
            ports.add(conn.laddr.port)
    return ports


def instance_status(home: Path) -> Dict[int, bool]:
    """Map of instance number to whether its port is currently listening."""
    try:
        ports = listening_ports()
    except psutil.AccessDenied:
        logger.warning("Access denied reading the connection table; reporting all as down")
        ports = set()
    return {inst.number: inst.port in ports for inst in discover_instances(home)}
