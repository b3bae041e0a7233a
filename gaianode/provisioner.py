"""
Instance provisioner.

Allocates instance numbers and ports, then drives the vendor CLI through
install, init, config --port, init, start and info for each instance, one at
a time. The first failure aborts the run; instances provisioned before it are
left in place.
"""

import logging
from pathlib import Path
from typing import List, Optional, Callable

from gaianode.allocator import plan_instances
from gaianode.config import config
from gaianode.contracts import Instance, ModelChoice
from gaianode.runner import CommandRunner, NodeCLI, download_installer


class InstanceProvisioner:
    """
    Provisions and starts node instances on this host.

    Usage:
        provisioner = InstanceProvisioner()
        instances = provisioner.provision(KNOWN_MODELS["1"], count=2)
    """

    def __init__(
        self,
        home: Optional[Path] = None,
        info_dir: Optional[Path] = None,
        runner: Optional[CommandRunner] = None,
        installer_url: Optional[str] = None,
        fetch: Callable[[str, Path], Path] = download_installer,
        base_port: Optional[int] = None
    ):
        self.home = Path(home) if home is not None else config.get_home()
        self.info_dir = Path(info_dir) if info_dir is not None else config.get_info_dir()
        self.runner = runner or CommandRunner()
        self.installer_url = installer_url or config.INSTALLER_URL
        self.fetch = fetch
        self.base_port = base_port

        self.logger = logging.getLogger("Provisioner")

    def info_path(self, number: int) -> Path:
        return self.info_dir / f"node_info_{number}.txt"

    def provision(self, model: ModelChoice, count: int) -> List[Instance]:
        """
        Provision `count` new instances using the given model config.

        Returns:
            The instances that were provisioned, in order
        """
        instances = plan_instances(self.home, count, base_port=self.base_port)
        first = instances[0]
        self.logger.info(
            f"Provisioning {count} instance(s) starting at {first.number} "
            f"on port {first.port} with {model}"
        )

        for instance in instances:
            self.provision_one(instance, model)

        self.logger.info(f"All {count} instance(s) provisioned. Info files in {self.info_dir}")
        return instances

    def provision_one(self, instance: Instance, model: ModelChoice) -> Path:
        """Run the full command sequence for one instance and save its info output."""
        self.logger.info(
            f"Setting up instance {instance.number} in {instance.directory} (port {instance.port})"
        )
        instance.directory.mkdir(parents=True, exist_ok=True)

        cli = NodeCLI(instance, self.runner, fetch=self.fetch)

        self.logger.info(f"[{instance.number}] Installing node")
        cli.install(self.installer_url)

        self.logger.info(f"[{instance.number}] Initializing with {model.config_url}")
        cli.init(model.config_url)

        self.logger.info(f"[{instance.number}] Setting port {instance.port}")
        cli.set_port(instance.port)

        # Required again after the port change
        cli.init()

        self.logger.info(f"[{instance.number}] Starting node")
        cli.start()

        info = cli.info()
        self.info_dir.mkdir(parents=True, exist_ok=True)
        path = self.info_path(instance.number)
        path.write_text(info)
        self.logger.info(f"[{instance.number}] Node info saved to {path}")
        return path
