"""
Data contracts for the node provisioner.
"""

from dataclasses import dataclass, asdict, field
from typing import List, Dict, Optional
from pathlib import Path
import json
import re

CONFIG_BASE_URL = "https://raw.githubusercontent.com/GaiaNet-AI/node-configs/main"

CUSTOM_SELECTION = "5"

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")
_NODE_ID = re.compile(r"Node ID:\s*(\S+)")
_DEVICE_ID = re.compile(r"Device ID:\s*(\S+)")


class InvalidSelectionError(ValueError):
    """Raised for a menu selection or instance count the provisioner cannot use."""


@dataclass(frozen=True)
class ModelChoice:
    name: str
    config_url: str

    def __str__(self):
        return f"{self.name} ({self.config_url})"

    @classmethod
    def custom(cls, config_url: str) -> 'ModelChoice':
        return cls(name="Custom", config_url=config_url)


KNOWN_MODELS: Dict[str, ModelChoice] = {
    "1": ModelChoice("Qwen 1.5 0.5B Chat", f"{CONFIG_BASE_URL}/qwen-1.5-0.5b-chat/config.json"),
    "2": ModelChoice("Phi-3 Mini Instruct 4k", f"{CONFIG_BASE_URL}/phi-3-mini-instruct-4k/config.json"),
    "3": ModelChoice("Llama 3 8B Instruct", f"{CONFIG_BASE_URL}/llama-3-8b-instruct/config.json"),
    "4": ModelChoice("Gemma 2 2B Instruct", f"{CONFIG_BASE_URL}/gemma-2-2b-it/config.json"),
}


def resolve_model(selection: str, custom_url: Optional[str] = None) -> ModelChoice:
    """
    Map a menu selection to a model configuration.

    Args:
        selection: "1"-"4" for a known model, "5" for a custom URL
        custom_url: Operator-supplied URL, used verbatim for selection "5"

    Raises:
        InvalidSelectionError: for anything outside 1-5, or "5" without a URL
    """
    selection = selection.strip()
    if selection in KNOWN_MODELS:
        return KNOWN_MODELS[selection]
    if selection == CUSTOM_SELECTION:
        if not custom_url:
            raise InvalidSelectionError("A config URL is required for a custom model")
        return ModelChoice.custom(custom_url)
    raise InvalidSelectionError(f"Invalid selection: {selection!r}")


@dataclass
class Instance:
    number: int
    directory: Path
    port: int

    @property
    def bin_dir(self) -> Path:
        return self.directory / "bin"

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['directory'] = str(self.directory)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass
class CommandResult:
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class InfoRecord:
    """Captured output of `gaianet info` for one instance."""
    number: int
    text: str
    node_id: Optional[str] = field(default=None)
    device_id: Optional[str] = field(default=None)

    @classmethod
    def parse(cls, number: int, text: str) -> 'InfoRecord':
        plain = _ANSI_ESCAPE.sub("", text)
        node = _NODE_ID.search(plain)
        device = _DEVICE_ID.search(plain)
        return cls(
            number=number,
            text=text,
            node_id=node.group(1) if node else None,
            device_id=device.group(1) if device else None,
        )

    def to_dict(self) -> Dict:
        return {'number': self.number, 'node_id': self.node_id, 'device_id': self.device_id}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
