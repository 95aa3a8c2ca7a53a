"""HTTP client for reading, writing and deleting blobs on a volume server."""

from typing import Optional, Union

import httpx
from pydantic import ValidationError

from common.constants import DEFAULT_CONTENT_TYPE, DEFAULT_TIMEOUT_SECONDS, DEFAULT_UPLOAD_FILENAME
from common.exceptions import (
    BlobNotFound,
    DecodeError,
    DeleteRejected,
    ReadRejected,
    TransportError,
    UploadRejected,
)
from common.logging_config import get_logger
from common.responses import decode_json, error_text
from common.types import FID, Location, parse_address
from volume.schemas import (
    DeleteResponse,
    GetFileOptions,
    MultipartPayload,
    RawPayload,
    UploadOptions,
    UploadPayload,
    UploadResponse,
)

logger = get_logger(__name__)


class VolumeClient:
    """
    Async client bound to one volume server.

    Every call opens and closes its own connection, so a single instance
    can be shared freely between concurrent tasks.
    """

    def __init__(
        self,
        host: str,
        port: int,
        scheme: str = "http",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.host = host
        self.port = port
        self.scheme = scheme
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_str(cls, address: str, **kwargs) -> 'VolumeClient':
        """
        Create a client from a volume server address.

        Args:
            address: Address like "127.0.0.1:8080", as found in a Location

        Raises:
            MalformedAddress: If the address is not host:port
        """
        scheme, host, port = parse_address(address)
        return cls(host, port, scheme=scheme, **kwargs)

    def get_base_url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    def _session(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.get_base_url(),
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _send(self, method: str, fid: FID, **kwargs) -> httpx.Response:
        path = f"/{fid}"
        logger.debug(f"Volume request: {method} {self.get_base_url()}{path}")
        try:
            async with self._session() as session:
                return await session.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.error(
                f"Volume server unreachable: {method} {self.get_base_url()}{path} error={type(e).__name__}: {e}"
            )
            raise TransportError(f"Cannot reach volume server {self.get_base_url()}: {e}") from e

    async def upload(
        self,
        fid: FID,
        payload: UploadPayload,
        options: Optional[UploadOptions] = None
    ) -> UploadResponse:
        """
        Write a blob for the given file id.

        The payload variant selects the request shape: RawPayload is sent as
        the whole body with PUT, MultipartPayload as a single form file part
        with POST. No retry is attempted; a second write to a filled key is
        rejected by the server.

        Args:
            fid: Assigned file id
            payload: RawPayload or MultipartPayload
            options: Optional upload metadata

        Returns:
            UploadResponse with stored size and checksum

        Raises:
            TransportError: If the volume server cannot be reached
            UploadRejected: If the volume server refuses the write
            DecodeError: If the response body has an unexpected shape
        """
        options = options or UploadOptions()
        headers = {}
        if options.jwt:
            headers['Authorization'] = f"Bearer {options.jwt}"
        params = options.to_query_params()

        if isinstance(payload, RawPayload):
            headers['Content-Type'] = options.mime or DEFAULT_CONTENT_TYPE
            response = await self._send(
                'PUT', fid, content=payload.data, params=params, headers=headers
            )
        elif isinstance(payload, MultipartPayload):
            filename = payload.filename or options.filename or DEFAULT_UPLOAD_FILENAME
            mime = payload.mime or options.mime or DEFAULT_CONTENT_TYPE
            files = {payload.field_name: (filename, payload.data, mime)}
            response = await self._send(
                'POST', fid, files=files, params=params, headers=headers
            )
        else:
            raise TypeError(f"Unsupported upload payload: {type(payload).__name__}")

        if not response.is_success:
            message = error_text(response)
            logger.warning(f"Upload rejected: fid={fid} status={response.status_code} error={message}")
            raise UploadRejected(message, status_code=response.status_code)

        data = decode_json(response)
        if data.get('error'):
            logger.warning(f"Upload rejected: fid={fid} error={data['error']}")
            raise UploadRejected(str(data['error']), status_code=response.status_code)

        try:
            result = UploadResponse.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Unexpected upload response: {e}") from e

        logger.info(f"Uploaded fid={fid} mode={payload.mode} size={result.size}")
        return result

    async def upload_bytes(
        self,
        fid: FID,
        data: bytes,
        options: Optional[UploadOptions] = None
    ) -> UploadResponse:
        """Upload data as the raw request body."""
        return await self.upload(fid, RawPayload(data=data), options)

    async def upload_form(
        self,
        fid: FID,
        data: bytes,
        filename: Optional[str] = None,
        mime: Optional[str] = None,
        options: Optional[UploadOptions] = None
    ) -> UploadResponse:
        """Upload data as a multipart form file part."""
        payload = MultipartPayload(data=data, filename=filename, mime=mime)
        return await self.upload(fid, payload, options)

    async def get_file_bytes(self, fid: FID, options: Optional[GetFileOptions] = None) -> bytes:
        """
        Read a blob.

        Raises:
            TransportError: If the volume server cannot be reached
            BlobNotFound: If the file id holds no data
            ReadRejected: If the volume server refuses the read
        """
        params = options.to_query_params() if options else {}
        response = await self._send('GET', fid, params=params)

        if response.status_code == 404:
            raise BlobNotFound(f"File {fid} not found on volume server", status_code=404)
        if not response.is_success:
            message = error_text(response)
            logger.warning(f"Read rejected: fid={fid} status={response.status_code} error={message}")
            raise ReadRejected(message, status_code=response.status_code)

        return response.content

    async def delete_file(self, fid: FID, jwt: Optional[str] = None) -> DeleteResponse:
        """
        Delete a blob.

        Raises:
            TransportError: If the volume server cannot be reached
            BlobNotFound: If the file id holds no data
            DeleteRejected: If the volume server refuses the delete
            DecodeError: If the response body has an unexpected shape
        """
        headers = {'Authorization': f"Bearer {jwt}"} if jwt else {}
        response = await self._send('DELETE', fid, headers=headers)

        if response.status_code == 404:
            raise BlobNotFound(f"File {fid} not found on volume server", status_code=404)
        if not response.is_success:
            message = error_text(response)
            logger.warning(f"Delete rejected: fid={fid} status={response.status_code} error={message}")
            raise DeleteRejected(message, status_code=response.status_code)

        try:
            result = DeleteResponse.model_validate(decode_json(response))
        except ValidationError as e:
            raise DecodeError(f"Unexpected delete response: {e}") from e

        logger.info(f"Deleted fid={fid} size={result.size}")
        return result


def resolve_volume_address(
    location_or_url: Union[Location, str],
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> VolumeClient:
    """
    Build a VolumeClient from a Location or a raw "host:port" string.

    Args:
        location_or_url: Location (its internal url is used) or address string
        timeout: Request timeout in seconds
        transport: Optional httpx transport

    Returns:
        VolumeClient bound to the address

    Raises:
        MalformedAddress: If the address has no numeric port
    """
    address = location_or_url.url if isinstance(location_or_url, Location) else location_or_url
    return VolumeClient.from_str(address, timeout=timeout, transport=transport)
