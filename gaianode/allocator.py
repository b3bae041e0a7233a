"""
Instance number and port allocation.

Numbers come from scanning the home directory for existing instance
directories. The scan and the later mkdir are not atomic, so two
provisioners running at once on the same host can pick the same number.
"""

import re
import logging
from pathlib import Path
from typing import List, Optional

from gaianode.config import config
from gaianode.contracts import Instance

logger = logging.getLogger("Allocator")


def existing_numbers(home: Path, prefix: Optional[str] = None) -> List[int]:
    """Sorted instance numbers of the `<prefix><digits>` directories under home."""
    prefix = prefix if prefix is not None else config.NODE_PREFIX
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")

    if not home.is_dir():
        return []

    numbers = []
    for entry in home.iterdir():
        match = pattern.match(entry.name)
        if match and entry.is_dir():
            numbers.append(int(match.group(1)))
    return sorted(numbers)


def next_instance_number(home: Path, prefix: Optional[str] = None,
                         default_base: Optional[int] = None) -> int:
    numbers = existing_numbers(home, prefix)
    base = default_base if default_base is not None else config.DEFAULT_BASE_NUMBER
    # Numbers below the floor never pull allocation under base + 1
    highest = max([base, *numbers])
    logger.debug(f"Highest existing instance in {home}: {highest}")
    return highest + 1


def port_for(number: int, base_port: Optional[int] = None) -> int:
    base_port = base_port if base_port is not None else config.BASE_PORT
    return base_port + number


def instance_dir(home: Path, number: int, prefix: Optional[str] = None) -> Path:
    prefix = prefix if prefix is not None else config.NODE_PREFIX
    return home / f"{prefix}{number}"


def plan_instances(home: Path, count: int, prefix: Optional[str] = None,
                   base_port: Optional[int] = None) -> List[Instance]:
    """
    Allocate `count` consecutive instances after the highest one on disk.

    Args:
        home: Directory scanned for existing instances and used for new ones
        count: Number of instances to allocate
        prefix: Directory name prefix (defaults to config)
        base_port: Added to the instance number to get its port

    Returns:
        Instances with strictly increasing, contiguous numbers and ports
    """
    if count < 1:
        raise ValueError(f"Instance count must be positive, got {count}")

    start = next_instance_number(home, prefix)
    port_start = port_for(start, base_port)

    return [
        Instance(
            number=start + i,
            directory=instance_dir(home, start + i, prefix),
            port=port_start + i,
        )
        for i in range(count)
    ]


def discover_instances(home: Path, prefix: Optional[str] = None,
                       base_port: Optional[int] = None) -> List[Instance]:
    """Instances already on disk, ascending by number."""
    return [
        Instance(number=n, directory=instance_dir(home, n, prefix), port=port_for(n, base_port))
        for n in existing_numbers(home, prefix)
    ]
