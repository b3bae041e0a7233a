"""
Shared fixtures: a fake command runner standing in for the vendor installer
and the gaianet CLI.
"""

from pathlib import Path
from typing import List, Dict, Optional, Callable

import pytest

from gaianode.contracts import CommandResult
from gaianode.runner import ExecError

INFO_TEMPLATE = (
    "\x1b[0;32mNode ID: 0xnode{number}\x1b[0m\n"
    "Device ID: device-{number}\n"
)


class FakeRunner:
    """Records every command and answers `info` with a canned Node/Device ID."""

    def __init__(self, fail_when: Optional[Callable[[List[str]], bool]] = None, fail_code: int = 1,
                 interrupt_when: Optional[Callable[[List[str]], bool]] = None):
        self.calls: List[List[str]] = []
        self.envs: List[Optional[Dict[str, str]]] = []
        self.captures: List[bool] = []
        self.fail_when = fail_when
        self.fail_code = fail_code
        self.interrupt_when = interrupt_when

    def run(self, args, env=None, capture=True) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        self.envs.append(env)
        self.captures.append(capture)

        if self.interrupt_when and self.interrupt_when(args):
            raise KeyboardInterrupt
        if self.fail_when and self.fail_when(args):
            raise ExecError(CommandResult(args=args, returncode=self.fail_code, stderr="boom"))

        stdout = ""
        if "info" in args:
            base = args[args.index("--base") + 1]
            number = base.rsplit("-", 1)[-1]
            stdout = INFO_TEMPLATE.format(number=number)
        return CommandResult(args=args, returncode=0, stdout=stdout)

    def subcommands(self) -> List[str]:
        """gaianet subcommand of every call, "install" for the installer."""
        return ["install" if c[0] == "bash" else c[1] for c in self.calls]

    def bases(self) -> List[str]:
        return [c[c.index("--base") + 1] for c in self.calls]


def fake_fetch(url: str, dest: Path) -> Path:
    dest.write_text("#!/bin/bash\n")
    return dest


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def home(tmp_path):
    path = tmp_path / "home"
    path.mkdir()
    return path
