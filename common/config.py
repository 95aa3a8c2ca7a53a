"""Cluster connection settings passed explicitly into the clients."""

from dataclasses import dataclass

from common.constants import DEFAULT_MASTER_PORT, DEFAULT_TIMEOUT_SECONDS
from common.types import parse_address


@dataclass(frozen=True)
class ClusterConfig:
    """
    Address of the master server and request timeout.
    """
    master_host: str = "localhost"
    master_port: int = DEFAULT_MASTER_PORT
    scheme: str = "http"
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_str(cls, address: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> 'ClusterConfig':
        """
        Create a config from a master address string.

        Args:
            address: Master address, e.g. "10.0.0.1:9333"
            timeout: Request timeout in seconds

        Raises:
            MalformedAddress: If the address is not host:port
        """
        scheme, host, port = parse_address(address)
        return cls(master_host=host, master_port=port, scheme=scheme, timeout=timeout)

    def get_base_url(self) -> str:
        """
        Get master base URL.

        Returns:
            Base URL string (e.g., "http://localhost:9333")
        """
        return f"{self.scheme}://{self.master_host}:{self.master_port}"
