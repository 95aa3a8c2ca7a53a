"""Shared pytest fixtures for all tests."""

import httpx
import pytest

from cli.config import Config
from common.config import ClusterConfig


class FakeCluster:
    """
    In-memory master and volume server behind httpx.MockTransport.

    The master hands out ids from a fixed list; the volume server stores
    blobs by file id and refuses a second write to the same id.
    """

    def __init__(self, fids=None, volume_url='127.0.0.1:8080', public_url=None):
        self.fids = list(fids or ['3,01637037d6', '3,01637038e7', '4,0a1b2c3d4e'])
        self.volume_url = volume_url
        self.public_url = public_url or volume_url
        self.blobs: dict[str, bytes] = {}
        self.uploads: list[dict] = []
        self.master_requests: list[httpx.Request] = []
        self.volume_requests: list[httpx.Request] = []

    def master_handler(self, request: httpx.Request) -> httpx.Response:
        self.master_requests.append(request)
        if request.url.path == '/dir/assign':
            if not self.fids:
                return httpx.Response(406, json={'error': 'No free volumes left!'})
            count = int(request.url.params.get('count', '1'))
            fid = self.fids.pop(0)
            return httpx.Response(200, json={
                'fid': fid,
                'url': self.volume_url,
                'publicUrl': self.public_url,
                'count': count,
            })
        if request.url.path == '/dir/lookup':
            volume_id = request.url.params.get('volumeId')
            if volume_id not in ('3', '4'):
                return httpx.Response(404, json={
                    'volumeId': volume_id,
                    'error': f'volume id {volume_id} not found',
                })
            return httpx.Response(200, json={
                'volumeId': volume_id,
                'locations': [{'url': self.volume_url, 'publicUrl': self.public_url}],
            })
        return httpx.Response(404)

    def volume_handler(self, request: httpx.Request) -> httpx.Response:
        self.volume_requests.append(request)
        fid = request.url.path.lstrip('/')

        if request.method in ('PUT', 'POST'):
            if fid in self.blobs:
                return httpx.Response(500, json={'error': f'{fid} already has data'})
            content_type = request.headers.get('content-type', '')
            if content_type.startswith('multipart/form-data'):
                filename, data = parse_multipart_file(request)
            else:
                filename, data = None, request.content
            self.blobs[fid] = data
            self.uploads.append({
                'fid': fid,
                'method': request.method,
                'content_type': content_type,
                'filename': filename,
                'data': data,
            })
            body = {'size': len(data), 'eTag': 'deadbeef'}
            if filename:
                body['name'] = filename
            return httpx.Response(201, json=body)

        if request.method == 'GET':
            if fid not in self.blobs:
                return httpx.Response(404)
            return httpx.Response(200, content=self.blobs[fid])

        if request.method == 'DELETE':
            if fid not in self.blobs:
                return httpx.Response(404, json={'error': 'not found'})
            data = self.blobs.pop(fid)
            return httpx.Response(202, json={'size': len(data)})

        return httpx.Response(405)

    @property
    def master_transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.master_handler)

    @property
    def volume_transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.volume_handler)


def parse_multipart_file(request: httpx.Request) -> tuple[str | None, bytes]:
    """Extract the filename and content of the first file part of a multipart body."""
    content_type = request.headers['content-type']
    boundary = content_type.split('boundary=')[1].strip('"').encode()
    for part in request.content.split(b'--' + boundary):
        if b'filename=' not in part:
            continue
        head, _, body = part.partition(b'\r\n\r\n')
        filename = head.split(b'filename="')[1].split(b'"')[0].decode()
        if body.endswith(b'\r\n'):
            body = body[:-2]
        return filename, body
    return None, b''



@pytest.fixture
def fake_cluster():
    """Fresh in-memory master and volume server."""
    return FakeCluster()


@pytest.fixture
def cluster_config():
    """ClusterConfig pointing at a fake master."""
    return ClusterConfig(master_host='master.test', master_port=9333, timeout=5)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .weedclient directory
    """
    config_dir = tmp_path / '.weedclient'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing file uploads.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'hello.txt'
    file_path.write_text('Hello World!')
    return file_path
