"""
Bridge configuration, stored as JSON in ~/.signal-bridge/config.json.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from signal_bridge.errors import ConfigError
from signal_bridge.transport.framing import DEFAULT_MAX_BUFFER_BYTES

CONFIG_FILE = Path.home() / ".signal-bridge" / "config.json"
DEFAULT_ATTACHMENTS_DIR = Path.home() / ".local" / "share" / "signal-cli" / "attachments"
ACCOUNT_ENV = "SIGNAL_BRIDGE_ACCOUNT"


class BridgeConfig(BaseModel):
    account: Optional[str] = None
    command: Optional[list[str]] = None
    attachments_dir: Path = DEFAULT_ATTACHMENTS_DIR
    max_buffer_bytes: int = DEFAULT_MAX_BUFFER_BYTES
    auto_reveal: bool = False
    notify: bool = True
    self_label: str = "Me"
    stop_timeout: float = 5.0

    def daemon_command(self) -> list[str]:
        """The argv used to launch signal-cli in JSON-RPC mode."""
        if self.command:
            return list(self.command)
        if not self.account:
            raise ConfigError(
                "No account configured. Run `signal-bridge config set account +NUMBER` "
                f"or set {ACCOUNT_ENV}."
            )
        return ["signal-cli", "-a", self.account, "jsonRpc"]


def load_config(path: Optional[Path] = None) -> BridgeConfig:
    path = path or CONFIG_FILE
    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError):
        raw = {}
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}")
    if not isinstance(raw, dict):
        raise ConfigError(f"Config in {path} must be a JSON object")
    if os.environ.get(ACCOUNT_ENV):
        raw["account"] = os.environ[ACCOUNT_ENV]
    try:
        return BridgeConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {e}")


def save_config(config: BridgeConfig, path: Optional[Path] = None) -> None:
    path = path or CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2, exclude_defaults=True))
