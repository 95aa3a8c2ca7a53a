"""Configuration management for the weedclient CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path

from common.config import ClusterConfig
from common.constants import DEFAULT_MASTER_PORT, DEFAULT_TIMEOUT_SECONDS
from common.logging_config import get_logger
from common.types import parse_address

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "master_host": os.environ.get("WEED_MASTER_HOST", "localhost"),
        "master_port": int(os.environ.get("WEED_MASTER_PORT", str(DEFAULT_MASTER_PORT))),
        "master_scheme": os.environ.get("WEED_MASTER_SCHEME", "http"),
        "timeout": DEFAULT_TIMEOUT_SECONDS,
        "volume_timeout": 60.0,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.weedclient/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.weedclient' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, OSError) as e:
                backup_path = self.config_path.with_suffix('.json.bak')
                logger.warning(f"Config file {self.config_path} unreadable ({e}), backing up to {backup_path}")
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config file: {copy_error}")
                return self.DEFAULT_CONFIG.copy()
        else:
            config = self.DEFAULT_CONFIG.copy()
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except OSError as e:
                logger.warning(f"Could not write default config to {self.config_path}: {e}")
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not save config to {self.config_path}: {e}")

    def set_master(self, address: str) -> None:
        """
        Set master address and save to file.

        Args:
            address: Master address, e.g. "10.0.0.1:9333" or "https://master.example:9333"

        Raises:
            MalformedAddress: If the address is not host:port
        """
        scheme, host, port = parse_address(address)
        self.data['master_scheme'] = scheme
        self.data['master_host'] = host
        self.data['master_port'] = port
        self.save()

    def get_base_url(self) -> str:
        """
        Get master base URL.

        Returns:
            Base URL string (e.g., "http://localhost:9333")
        """
        return self.get_cluster_config().get_base_url()

    def get_timeout(self) -> float:
        """
        Get master request timeout in seconds.
        """
        return float(self.data.get('timeout', DEFAULT_TIMEOUT_SECONDS))

    def get_volume_timeout(self) -> float:
        """
        Get volume server request timeout in seconds (uploads and downloads).
        """
        return float(self.data.get('volume_timeout', 60.0))

    def get_cluster_config(self) -> ClusterConfig:
        """
        Build the master connection settings passed to MasterClient.

        Returns:
            ClusterConfig for the configured master
        """
        return ClusterConfig(
            master_host=self.data.get('master_host', 'localhost'),
            master_port=int(self.data.get('master_port', DEFAULT_MASTER_PORT)),
            scheme=self.data.get('master_scheme', 'http'),
            timeout=self.get_timeout(),
        )
