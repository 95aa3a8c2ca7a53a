"""Integration tests against a running master and volume server.

Set WEED_MASTER (e.g. "localhost:9333") to run them.
"""

import os

import pytest

from common.config import ClusterConfig
from common.exceptions import BlobNotFound
from master.client import MasterClient
from master.schemas import AssignKeyOptions
from volume.client import resolve_volume_address
from volume.schemas import MultipartPayload, RawPayload

MASTER_ADDRESS = os.environ.get('WEED_MASTER')

pytestmark = pytest.mark.skipif(not MASTER_ADDRESS, reason="WEED_MASTER not set")


@pytest.fixture
def master():
    return MasterClient(ClusterConfig.from_str(MASTER_ADDRESS, timeout=10))


@pytest.mark.asyncio
async def test_assign_upload_read_delete(master):
    """Test the full blob lifecycle on a live cluster."""
    assigned = await master.assign()
    volume = resolve_volume_address(assigned.location, timeout=10)

    uploaded = await volume.upload(assigned.fid, RawPayload(data=b'Hello World!'))
    assert uploaded.size == 12

    assert await volume.get_file_bytes(assigned.fid) == b'Hello World!'

    await volume.delete_file(assigned.fid)
    with pytest.raises(BlobNotFound):
        await volume.get_file_bytes(assigned.fid)


@pytest.mark.asyncio
async def test_multipart_upload_and_lookup(master):
    assigned = await master.assign()
    volume = resolve_volume_address(assigned.location, timeout=10)

    payload = MultipartPayload(data=b'Hello World!', filename='hello.txt', mime='text/plain')
    uploaded = await volume.upload(assigned.fid, payload)
    assert uploaded.size == 12

    lookup = await master.lookup_volume(assigned.fid)
    assert assigned.location.url in [location.url for location in lookup.get_locations()]

    await volume.delete_file(assigned.fid)


@pytest.mark.asyncio
async def test_batch_assign(master):
    assigned = await master.assign(AssignKeyOptions(count=3))

    assert len(assigned.assignments()) == assigned.count
