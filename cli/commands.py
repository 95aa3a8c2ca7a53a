"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from cli.models import (
    AssignCommand,
    DeleteCommand,
    GetCommand,
    LookupCommand,
    MasterCommand,
    PutCommand,
    PutFormCommand,
)
from cli.config import Config
from cli.cluster_client import ClusterClient

logger = get_logger(__name__)


_client: Optional[ClusterClient] = None


def get_client() -> ClusterClient:
    """
    Get or create the REPL's ClusterClient instance.

    Returns:
        ClusterClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new ClusterClient instance")
        config = Config(Path.home() / '.weedclient' / 'config.json')
        _client = ClusterClient(config)
    return _client


def handle_assign(cmd: AssignCommand, client: Optional[ClusterClient] = None) -> str:
    """
    Handle 'assign' command.

    Args:
        cmd: AssignCommand with count and placement options
        client: Optional ClusterClient for dependency injection (testing)

    Returns:
        Assigned file ids or error message
    """
    logger.info(f"Executing assign command: count={cmd.count} collection={cmd.collection}")
    if client is None:
        client = get_client()
    return client.assign(
        count=cmd.count,
        collection=cmd.collection,
        replication=cmd.replication,
        ttl=cmd.ttl,
        data_center=cmd.data_center,
    )


def handle_put(cmd: PutCommand | PutFormCommand, client: Optional[ClusterClient] = None) -> str:
    """
    Handle 'put' and 'put-form' commands.

    Args:
        cmd: PutCommand (raw body) or PutFormCommand (multipart form)
        client: Optional ClusterClient for dependency injection (testing)

    Returns:
        Upload result or error message
    """
    multipart = isinstance(cmd, PutFormCommand)
    logger.info(f"Executing {cmd.command} command: file={cmd.file_path}")
    if client is None:
        client = get_client()
    result = client.put_file(
        cmd.file_path,
        multipart=multipart,
        mime=cmd.mime,
        collection=cmd.collection,
        replication=cmd.replication,
        ttl=cmd.ttl,
    )
    logger.debug(f"{cmd.command} command completed")
    return result


def handle_get(cmd: GetCommand, client: Optional[ClusterClient] = None) -> str:
    """
    Handle 'get' command.

    Args:
        cmd: GetCommand with fid and optional output_path
        client: Optional ClusterClient for dependency injection (testing)

    Returns:
        Download result or error message
    """
    logger.info(f"Executing get command: fid={cmd.fid} output_path={cmd.output_path}")
    if client is None:
        client = get_client()
    return client.get_file(cmd.fid, cmd.output_path)


def handle_delete(cmd: DeleteCommand, client: Optional[ClusterClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.delete_file(cmd.fid)


def handle_lookup(cmd: LookupCommand, client: Optional[ClusterClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.lookup(cmd.volume_id)


def handle_master(cmd: MasterCommand, client: Optional[ClusterClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.set_master(cmd.address)
