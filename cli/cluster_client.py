"""Cluster operations for the CLI: assign then upload, lookup then read or delete."""

import asyncio
from pathlib import Path
from typing import Optional

import httpx
from pydantic import ValidationError

from cli.config import Config
from cli.utils import format_file_size, guess_mime_type
from common.exceptions import (
    AllocationError,
    AllocationRejected,
    BlobNotFound,
    DecodeError,
    LookupRejected,
    MalformedAddress,
    MalformedIdentifier,
    RejectedError,
    TransportError,
    UploadRejected,
    WeedError,
)
from common.logging_config import get_logger
from common.types import Location, parse_fid
from master.client import MasterClient
from master.schemas import AssignKeyOptions
from volume.client import VolumeClient, resolve_volume_address
from volume.schemas import MultipartPayload, RawPayload, UploadOptions

logger = get_logger(__name__)


class ClusterClient:
    """Runs CLI commands against the master and volume servers and formats the results."""

    def __init__(
        self,
        config: Config,
        master_transport: Optional[httpx.AsyncBaseTransport] = None,
        volume_transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize cluster client.

        Args:
            config: Configuration instance
            master_transport: Optional httpx transport for master requests (testing)
            volume_transport: Optional httpx transport for volume requests (testing)
        """
        self.config = config
        self._master_transport = master_transport
        self._volume_transport = volume_transport
        self.master = MasterClient(config.get_cluster_config(), transport=master_transport)
        logger.info(f"Initialized ClusterClient [master={config.get_base_url()}]")

    def _volume(self, location: Location) -> VolumeClient:
        return resolve_volume_address(
            location,
            timeout=self.config.get_volume_timeout(),
            transport=self._volume_transport,
        )

    def _format_error(self, error: WeedError) -> str:
        """
        Map client errors to user-friendly messages.

        Args:
            error: Error raised by the master or volume client

        Returns:
            User-friendly error message
        """
        if isinstance(error, AllocationError):
            return f"Cannot connect to master at {self.config.get_base_url()}. Is it running?"
        if isinstance(error, TransportError):
            return f"Cannot connect to server: {error}"
        if isinstance(error, AllocationRejected):
            return f"Master refused assignment: {error.message}"
        if isinstance(error, LookupRejected):
            return f"Volume lookup failed: {error.message}"
        if isinstance(error, BlobNotFound):
            return "File not found on volume server."
        if isinstance(error, UploadRejected):
            return f"Volume server refused upload: {error.message}"
        if isinstance(error, RejectedError):
            return f"Volume server refused request: {error.message}"
        if isinstance(error, DecodeError):
            return f"Unexpected response from server: {error}"
        if isinstance(error, MalformedIdentifier):
            return f"Invalid file id: {error}"
        if isinstance(error, MalformedAddress):
            return f"Invalid address: {error}"
        return str(error)

    async def _first_location(self, fid) -> Location:
        lookup = await self.master.lookup_volume(fid)
        locations = lookup.get_locations()
        if not locations:
            raise LookupRejected(f"No locations for volume {fid.volume_id}")
        return locations[0]

    def assign(
        self,
        count: int = 1,
        collection: Optional[str] = None,
        replication: Optional[str] = None,
        ttl: Optional[str] = None,
        data_center: Optional[str] = None
    ) -> str:
        """
        Request file ids from the master.

        Returns:
            Formatted list of assigned file ids and their location
        """
        try:
            options = AssignKeyOptions(
                count=count,
                collection=collection,
                replication=replication,
                ttl=ttl,
                data_center=data_center,
            )
        except ValidationError as e:
            return f"Error: Invalid assign options: {e.errors()[0]['msg']}"

        try:
            result = asyncio.run(self.master.assign(options))
        except WeedError as e:
            logger.error(f"Assign failed: {e}")
            return f"Error: {self._format_error(e)}"

        output = [f"Assigned {result.count} file id(s) on {result.location.external_url}:"]
        for fid, _ in result.assignments():
            output.append(f"  - {fid}")
        return '\n'.join(output)

    def put_file(
        self,
        file_path: str,
        multipart: bool = False,
        mime: Optional[str] = None,
        collection: Optional[str] = None,
        replication: Optional[str] = None,
        ttl: Optional[str] = None
    ) -> str:
        """
        Upload a local file: assign a file id, then write the bytes to its volume server.

        Args:
            file_path: Local file to upload
            multipart: Send as a multipart form (keeps the filename) instead of a raw body
            mime: MIME type override (guessed from the extension if omitted)
            collection: Target collection
            replication: Replication strategy, e.g. "001"
            ttl: Time to live, e.g. "3d"

        Returns:
            Success message with file id and size, or error message
        """
        path = Path(file_path)
        if not path.exists():
            return f"Error: File not found: {file_path}"
        if not path.is_file():
            return f"Error: Not a file: {file_path}"

        mime = mime or guess_mime_type(file_path)
        try:
            assign_options = AssignKeyOptions(
                count=1, collection=collection, replication=replication, ttl=ttl
            )
            with open(path, 'rb') as f:
                data = f.read()
        except ValidationError as e:
            return f"Error: Invalid upload options: {e.errors()[0]['msg']}"
        except OSError as e:
            return f"Error reading file: {e}"

        if multipart:
            payload = MultipartPayload(data=data, filename=path.name, mime=mime)
        else:
            payload = RawPayload(data=data)

        async def _put():
            assigned = await self.master.assign(assign_options)
            upload_options = UploadOptions(mime=mime, ttl=assign_options.ttl, jwt=assigned.auth)
            volume = self._volume(assigned.location)
            uploaded = await volume.upload(assigned.fid, payload, upload_options)
            return assigned, uploaded

        logger.info(f"Uploading {path.name} ({len(data)} bytes, mode={payload.mode})")
        try:
            assigned, uploaded = asyncio.run(_put())
        except WeedError as e:
            logger.error(f"Upload of {path.name} failed: {e}")
            return f"Error uploading {file_path}: {self._format_error(e)}"

        return (
            f"Uploaded: {path.name} "
            f"(FID: {assigned.fid}, "
            f"Size: {format_file_size(uploaded.size)}, "
            f"URL: {assigned.location.external_url}/{assigned.fid})"
        )

    def get_file(self, fid_text: str, output_path: Optional[str] = None) -> str:
        """
        Download a blob to a local file.

        Args:
            fid_text: File id, e.g. "3,01637037d6"
            output_path: Output file or directory (defaults to the file id in the current directory)

        Returns:
            Success message with saved path, or error message
        """
        default_name = fid_text.replace(',', '_')
        try:
            fid = parse_fid(fid_text)
        except MalformedIdentifier as e:
            return f"Error: {self._format_error(e)}"

        async def _get():
            location = await self._first_location(fid)
            return await self._volume(location).get_file_bytes(fid)

        try:
            data = asyncio.run(_get())
        except WeedError as e:
            logger.error(f"Download of {fid} failed: {e}")
            return f"Error downloading {fid}: {self._format_error(e)}"

        output_file = Path(output_path) if output_path else Path.cwd() / default_name
        if output_file.is_dir():
            output_file = output_file / default_name

        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_bytes(data)
        except OSError as e:
            return f"Error writing file: {e}"

        return f"Downloaded: {fid} ({format_file_size(len(data))})\nSaved to: {output_file.absolute()}"

    def delete_file(self, fid_text: str) -> str:
        """
        Delete a blob.

        Returns:
            Success message with freed size, or error message
        """
        try:
            fid = parse_fid(fid_text)
        except MalformedIdentifier as e:
            return f"Error: {self._format_error(e)}"

        async def _delete():
            location = await self._first_location(fid)
            return await self._volume(location).delete_file(fid)

        try:
            result = asyncio.run(_delete())
        except WeedError as e:
            logger.error(f"Delete of {fid} failed: {e}")
            return f"Error deleting {fid}: {self._format_error(e)}"

        return f"Deleted: {fid} (Size: {format_file_size(result.size)})"

    def lookup(self, volume_id: str) -> str:
        """
        List the volume servers holding a volume.

        Returns:
            Formatted list of locations, or error message
        """
        if not volume_id.isdigit():
            return f"Error: Volume id must be a non-negative integer, got {volume_id!r}"

        try:
            result = asyncio.run(self.master.lookup_volume(int(volume_id)))
        except WeedError as e:
            logger.error(f"Lookup of volume {volume_id} failed: {e}")
            return f"Error: {self._format_error(e)}"

        locations = result.get_locations()
        if not locations:
            return f"No locations found for volume {volume_id}"

        output = [f"Volume {result.volume_id} is served by {len(locations)} location(s):"]
        for location in locations:
            if location.public_url and location.public_url != location.url:
                output.append(f"  - {location.url} (public: {location.public_url})")
            else:
                output.append(f"  - {location.url}")
        return '\n'.join(output)

    def set_master(self, address: Optional[str] = None) -> str:
        """
        Show or change the master address.

        Args:
            address: New master address; None shows the current one

        Returns:
            Current master address or error message
        """
        if address is None:
            return f"Master: {self.config.get_base_url()}"

        try:
            self.config.set_master(address)
        except MalformedAddress as e:
            return f"Error: {self._format_error(e)}"

        self.master = MasterClient(self.config.get_cluster_config(), transport=self._master_transport)
        return f"Master set to {self.config.get_base_url()}"
