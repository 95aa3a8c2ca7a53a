"""HTTP client for the master server's file id assignment and volume lookup."""

from typing import Optional, Union

import httpx
from pydantic import ValidationError

from common.config import ClusterConfig
from common.constants import ASSIGN_ENDPOINT, LOOKUP_ENDPOINT
from common.exceptions import (
    AllocationError,
    AllocationRejected,
    DecodeError,
    LookupRejected,
    TransportError,
)
from common.logging_config import get_logger
from common.responses import decode_json, error_text
from common.types import FID
from master.schemas import (
    AssignKeyOptions,
    AssignKeyResponse,
    LookupVolumeOptions,
    LookupVolumeResponse,
)

logger = get_logger(__name__)


class MasterClient:
    """Async client for the master server. Holds no state between calls."""

    def __init__(self, config: ClusterConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize master client.

        Args:
            config: Master address and timeout
            transport: Optional httpx transport (used by tests to fake the master)
        """
        self.config = config
        self._transport = transport
        logger.debug(f"Initialized MasterClient [base_url={config.get_base_url()}]")

    def _session(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.get_base_url(),
            timeout=self.config.timeout,
            transport=self._transport,
        )

    async def assign(self, options: Optional[AssignKeyOptions] = None) -> AssignKeyResponse:
        """
        Ask the master for a new file id and the volume server to write it to.

        Args:
            options: Assignment options; None requests a single id with server defaults

        Returns:
            AssignKeyResponse with the primary fid and location

        Raises:
            AllocationError: If the master cannot be reached
            AllocationRejected: If the master refuses the assignment
            DecodeError: If the response body has an unexpected shape
        """
        if options is None:
            options = AssignKeyOptions(count=1)
        params = options.to_query_params()

        logger.debug(f"Requesting assignment: GET {ASSIGN_ENDPOINT} params={params}")
        try:
            async with self._session() as session:
                response = await session.get(ASSIGN_ENDPOINT, params=params)
        except httpx.TransportError as e:
            logger.error(f"Master unreachable during assign: {type(e).__name__}: {e}")
            raise AllocationError(
                f"Cannot reach master at {self.config.get_base_url()}: {e}"
            ) from e

        if not response.is_success:
            message = error_text(response)
            logger.warning(f"Assignment rejected: status={response.status_code} error={message}")
            raise AllocationRejected(message, status_code=response.status_code)

        data = decode_json(response)
        if data.get('error'):
            logger.warning(f"Assignment rejected: error={data['error']}")
            raise AllocationRejected(str(data['error']), status_code=response.status_code)

        try:
            result = AssignKeyResponse.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Unexpected assign response: {e}") from e

        requested = options.count or 1
        if result.count > requested:
            raise DecodeError(
                f"Master granted {result.count} ids but only {requested} were requested"
            )

        logger.info(f"Assigned fid={result.fid} url={result.url} count={result.count}")
        return result

    async def lookup_volume(
        self,
        volume_id: Union[int, str, FID],
        options: Optional[LookupVolumeOptions] = None
    ) -> LookupVolumeResponse:
        """
        Look up the locations serving a volume.

        Args:
            volume_id: Volume id, or a FID whose volume should be looked up
            options: Optional lookup options

        Returns:
            LookupVolumeResponse listing the volume's locations

        Raises:
            TransportError: If the master cannot be reached
            LookupRejected: If the master cannot resolve the volume
            DecodeError: If the response body has an unexpected shape
        """
        if isinstance(volume_id, FID):
            volume_id = volume_id.volume_id
        params = {'volumeId': str(volume_id)}
        if options is not None:
            params.update(options.to_query_params())

        logger.debug(f"Looking up volume: GET {LOOKUP_ENDPOINT} params={params}")
        try:
            async with self._session() as session:
                response = await session.get(LOOKUP_ENDPOINT, params=params)
        except httpx.TransportError as e:
            logger.error(f"Master unreachable during lookup: {type(e).__name__}: {e}")
            raise TransportError(
                f"Cannot reach master at {self.config.get_base_url()}: {e}"
            ) from e

        if not response.is_success:
            message = error_text(response)
            logger.warning(f"Lookup rejected: volume={volume_id} status={response.status_code} error={message}")
            raise LookupRejected(message, status_code=response.status_code)

        data = decode_json(response)
        if data.get('error'):
            raise LookupRejected(str(data['error']), status_code=response.status_code)

        try:
            result = LookupVolumeResponse.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Unexpected lookup response: {e}") from e

        logger.debug(f"Volume {volume_id} has {len(result.locations)} location(s)")
        return result
