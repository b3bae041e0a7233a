"""
Tests for the per-instance provisioning sequence.
"""

import os

import pytest

from gaianode.contracts import KNOWN_MODELS, ModelChoice
from gaianode.provisioner import InstanceProvisioner
from gaianode.runner import ExecError
from tests.conftest import FakeRunner, fake_fetch

QWEN = KNOWN_MODELS["1"]


def make_provisioner(home, runner):
    return InstanceProvisioner(
        home=home,
        info_dir=home / "gaia-node-info",
        runner=runner,
        installer_url="https://installer.invalid/install.sh",
        fetch=fake_fetch,
    )


def test_two_instances_end_to_end(home, runner):
    provisioner = make_provisioner(home, runner)

    instances = provisioner.provision(QWEN, 2)

    assert [(i.number, i.port) for i in instances] == [(101, 8201), (102, 8202)]
    assert (home / "gaia-node-101").is_dir()
    assert (home / "gaia-node-102").is_dir()

    info_101 = home / "gaia-node-info" / "node_info_101.txt"
    info_102 = home / "gaia-node-info" / "node_info_102.txt"
    assert "Node ID: 0xnode101" in info_101.read_text()
    assert "Device ID: device-102" in info_102.read_text()

    inits = [c for c in runner.calls if "--config" in c]
    assert [c[c.index("--config") + 1] for c in inits] == [QWEN.config_url] * 2


def test_command_sequence_per_instance(home, runner):
    make_provisioner(home, runner).provision(QWEN, 1)

    base = str(home / "gaia-node-101")
    binary = str(home / "gaia-node-101" / "bin" / "gaianet")

    assert runner.calls[0][0] == "bash"
    assert runner.calls[0][2:] == ["--base", base]
    assert runner.calls[1:] == [
        [binary, "init", "--base", base, "--config", QWEN.config_url],
        [binary, "config", "--base", base, "--port", "8201"],
        [binary, "init", "--base", base],
        [binary, "start", "--base", base],
        [binary, "info", "--base", base],
    ]


def test_instance_bin_dir_is_on_child_path_only(home, runner):
    before = os.environ.get("PATH")

    make_provisioner(home, runner).provision(QWEN, 1)

    bin_dir = str(home / "gaia-node-101" / "bin")
    assert all(env["PATH"].startswith(bin_dir + os.pathsep) for env in runner.envs)
    assert os.environ.get("PATH") == before


def test_numbers_continue_after_existing(home, runner):
    (home / "gaia-node-107").mkdir()

    instances = make_provisioner(home, runner).provision(QWEN, 3)

    assert [i.number for i in instances] == [108, 109, 110]
    assert [i.port for i in instances] == [8208, 8209, 8210]


def test_custom_model_url_passed_verbatim(home, runner):
    model = ModelChoice.custom("https://example.com/custom/config.json")

    make_provisioner(home, runner).provision(model, 1)

    init = runner.calls[1]
    assert init[init.index("--config") + 1] == "https://example.com/custom/config.json"


def test_init_failure_stops_the_run(home):
    failing_base = str(home / "gaia-node-102")
    runner = FakeRunner(
        fail_when=lambda args: "init" in args and failing_base in args,
        fail_code=3,
    )
    provisioner = make_provisioner(home, runner)

    with pytest.raises(ExecError) as excinfo:
        provisioner.provision(QWEN, 3)

    assert excinfo.value.returncode == 3
    # Nothing ran for instance 103
    assert str(home / "gaia-node-103") not in runner.bases()
    assert not (home / "gaia-node-103").exists()
    # Instance 101 was fully provisioned and started
    assert (home / "gaia-node-info" / "node_info_101.txt").exists()
    assert not (home / "gaia-node-info" / "node_info_102.txt").exists()
    assert runner.subcommands().count("start") == 1


def test_installer_failure_is_fatal(home):
    runner = FakeRunner(fail_when=lambda args: args[0] == "bash")

    with pytest.raises(ExecError):
        make_provisioner(home, runner).provision(QWEN, 2)

    assert runner.subcommands() == ["install"]
    assert not (home / "gaia-node-102").exists()


def test_unwritable_home_is_fatal(tmp_path, runner):
    home = tmp_path / "file-not-dir"
    home.write_text("")

    with pytest.raises(OSError):
        make_provisioner(home, runner).provision(QWEN, 1)

    assert runner.calls == []
