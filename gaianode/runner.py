"""
Synchronous execution of external commands.

CommandRunner wraps subprocess and returns a CommandResult; NodeCLI binds the
vendor `gaianet` subcommands to one instance's installed binary so nothing has
to be put on the provisioner's own PATH.
"""

import os
import subprocess
import logging
import tempfile
import urllib.request
from pathlib import Path
from typing import List, Dict, Optional, Callable

from gaianode.config import config
from gaianode.contracts import CommandResult, Instance

logger = logging.getLogger("NodeCLI")


class ExecError(RuntimeError):
    """An external command exited non-zero or could not be started."""

    def __init__(self, result: CommandResult):
        self.result = result
        detail = result.stderr.strip().splitlines()[-1] if result.stderr.strip() else ""
        message = f"Command {' '.join(result.args)} failed with exit code {result.returncode}"
        if detail:
            message += f": {detail}"
        super().__init__(message)

    @property
    def returncode(self) -> int:
        return self.result.returncode


class CommandRunner:
    """Runs a command to completion, optionally capturing its output."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout if timeout is not None else config.COMMAND_TIMEOUT

    def run(self, args: List[str], env: Optional[Dict[str, str]] = None,
            capture: bool = True) -> CommandResult:
        """
        Run `args` and wait for it to exit.

        With capture=False the child writes straight to the terminal and the
        result's stdout/stderr are empty.
        """
        logger.debug(f"Running: {' '.join(args)}")
        try:
            proc = subprocess.run(
                args,
                capture_output=capture,
                text=True,
                env=env,
                timeout=self.timeout
            )
        except FileNotFoundError as e:
            raise ExecError(CommandResult(args=list(args), returncode=127, stderr=str(e)))
        except subprocess.TimeoutExpired as e:
            raise ExecError(CommandResult(
                args=list(args),
                returncode=124,
                stderr=f"timed out after {e.timeout}s"
            ))

        result = CommandResult(
            args=list(args),
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or ""
        )
        if not result.ok:
            raise ExecError(result)
        return result


def download_installer(url: str, dest: Path) -> Path:
    """Fetch the vendor install script over HTTPS."""
    logger.info(f"Downloading installer from {url}")
    urllib.request.urlretrieve(url, dest)
    return dest


class NodeCLI:
    """
    Invocation context for one instance's `gaianet` binary.

    Usage:
        cli = NodeCLI(instance, runner)
        cli.install(installer_url)
        cli.init(config_url)
        cli.set_port(instance.port)
    """

    def __init__(
        self,
        instance: Instance,
        runner: CommandRunner,
        fetch: Callable[[str, Path], Path] = download_installer
    ):
        self.instance = instance
        self.runner = runner
        self.fetch = fetch
        self.base = str(instance.directory)
        self.binary = str(instance.bin_dir / "gaianet")

    def _env(self) -> Dict[str, str]:
        # The instance's bin dir goes first for this child process only
        env = dict(os.environ)
        env["PATH"] = f"{self.instance.bin_dir}{os.pathsep}{env.get('PATH', '')}"
        return env

    def _gaianet(self, *args: str, capture: bool = False) -> CommandResult:
        return self.runner.run([self.binary, *args], env=self._env(), capture=capture)

    def install(self, installer_url: str) -> CommandResult:
        with tempfile.TemporaryDirectory(prefix="gaianode-") as tmp:
            script = self.fetch(installer_url, Path(tmp) / "install.sh")
            return self.runner.run(
                ["bash", str(script), "--base", self.base], env=self._env(), capture=False
            )

    def init(self, config_url: Optional[str] = None) -> CommandResult:
        if config_url:
            return self._gaianet("init", "--base", self.base, "--config", config_url)
        return self._gaianet("init", "--base", self.base)

    def set_port(self, port: int) -> CommandResult:
        return self._gaianet("config", "--base", self.base, "--port", str(port))

    def start(self) -> CommandResult:
        return self._gaianet("start", "--base", self.base)

    def stop(self) -> CommandResult:
        return self._gaianet("stop", "--base", self.base)

    def info(self) -> str:
        return self._gaianet("info", "--base", self.base, capture=True).stdout
