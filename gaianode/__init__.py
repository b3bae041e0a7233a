# gaianode/__init__.py
"""
Gaianode: provisions and launches multiple GaiaNet node instances on one host.

This package exposes core building blocks:
- InstanceProvisioner: allocates instance numbers/ports and drives the vendor CLI per instance
- NodeCLI, CommandRunner: synchronous external command execution bound to one instance
- plan_instances, discover_instances: directory-scan based instance allocation
- Contracts: dataclasses for model choices, instances, command results and info records
"""

__all__ = [
    "InstanceProvisioner",
    "NodeCLI",
    "CommandRunner",
    "ExecError",
    "plan_instances",
    "discover_instances",
    "ModelChoice",
    "Instance",
    "CommandResult",
    "InfoRecord",
    "InvalidSelectionError",
    "KNOWN_MODELS",
    "__version__",
]

__version__ = "0.1.0"

# Re-export convenient symbols from submodules
from .provisioner import InstanceProvisioner
from .runner import NodeCLI, CommandRunner, ExecError
from .allocator import plan_instances, discover_instances
from .contracts import (
    ModelChoice,
    Instance,
    CommandResult,
    InfoRecord,
    InvalidSelectionError,
    KNOWN_MODELS,
)
