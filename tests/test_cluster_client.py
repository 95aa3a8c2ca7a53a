"""End-to-end tests for ClusterClient against an in-memory cluster."""

import httpx
import pytest

from cli.cluster_client import ClusterClient


@pytest.fixture
def cluster_client(temp_config, fake_cluster):
    return ClusterClient(
        temp_config,
        master_transport=fake_cluster.master_transport,
        volume_transport=fake_cluster.volume_transport,
    )


def test_assign_lists_file_ids(cluster_client):
    result = cluster_client.assign(count=2)

    assert result.startswith('Assigned 2 file id(s) on 127.0.0.1:8080:')
    assert '  - 3,01637037d6' in result
    assert '  - 3,01637037d6_1' in result


def test_assign_invalid_options(cluster_client, fake_cluster):
    result = cluster_client.assign(replication='9')

    assert result.startswith('Error: Invalid assign options')
    assert fake_cluster.master_requests == []


def test_assign_master_unreachable(temp_config):
    def handler(request):
        raise httpx.ConnectError("Connection refused")

    client = ClusterClient(temp_config, master_transport=httpx.MockTransport(handler))

    result = client.assign()

    assert 'Cannot connect to master at http://localhost:9333' in result


def test_assign_master_out_of_space(temp_config):
    client = ClusterClient(
        temp_config,
        master_transport=httpx.MockTransport(
            lambda request: httpx.Response(406, json={'error': 'No free volumes left!'})
        ),
    )

    assert 'Master refused assignment: No free volumes left!' in client.assign()


def test_put_file_raw(cluster_client, fake_cluster, sample_file):
    """Test put assigns an id and uploads the file as the raw body."""
    result = cluster_client.put_file(str(sample_file))

    assert 'Uploaded: hello.txt' in result
    assert 'FID: 3,01637037d6' in result
    assert 'Size: 12 B' in result
    assert 'URL: 127.0.0.1:8080/3,01637037d6' in result

    upload = fake_cluster.uploads[0]
    assert upload['method'] == 'PUT'
    assert upload['content_type'] == 'text/plain'
    assert upload['data'] == b'Hello World!'


def test_put_file_multipart(cluster_client, fake_cluster, sample_file):
    """Test put-form keeps the filename in a multipart upload."""
    result = cluster_client.put_file(str(sample_file), multipart=True, ttl='1d')

    assert 'Uploaded: hello.txt' in result

    upload = fake_cluster.uploads[0]
    assert upload['method'] == 'POST'
    assert upload['filename'] == 'hello.txt'
    assert dict(fake_cluster.master_requests[0].url.params) == {'count': '1', 'ttl': '1d'}
    assert dict(fake_cluster.volume_requests[0].url.params) == {'ttl': '1d'}


def test_put_file_forwards_write_token(temp_config, sample_file):
    seen = []

    def master(request):
        return httpx.Response(200, json={
            'fid': '3,01637037d6', 'url': '127.0.0.1:8080', 'count': 1, 'auth': 'eyJ.a.b',
        })

    def volume(request):
        seen.append(request)
        return httpx.Response(201, json={'size': 12})

    client = ClusterClient(
        temp_config,
        master_transport=httpx.MockTransport(master),
        volume_transport=httpx.MockTransport(volume),
    )

    assert 'Uploaded' in client.put_file(str(sample_file))
    assert seen[0].headers['authorization'] == 'Bearer eyJ.a.b'


def test_put_missing_file(cluster_client, tmp_path, fake_cluster):
    result = cluster_client.put_file(str(tmp_path / 'missing.txt'))

    assert result.startswith('Error: File not found')
    assert fake_cluster.master_requests == []


def test_put_directory(cluster_client, tmp_path):
    assert cluster_client.put_file(str(tmp_path)).startswith('Error: Not a file')


def test_put_invalid_ttl(cluster_client, sample_file):
    assert 'Invalid upload options' in cluster_client.put_file(str(sample_file), ttl='soon')


def test_put_rejected_by_volume(temp_config, fake_cluster, sample_file):
    """Test a volume refusal is reported as a rejection."""
    fake_cluster.fids = ['3,01637037d6', '3,01637037d6']
    client = ClusterClient(
        temp_config,
        master_transport=fake_cluster.master_transport,
        volume_transport=fake_cluster.volume_transport,
    )

    client.put_file(str(sample_file))
    result = client.put_file(str(sample_file))

    assert 'Volume server refused upload' in result
    assert 'already has data' in result


def test_get_file_round_trip(cluster_client, sample_file, tmp_path):
    cluster_client.put_file(str(sample_file))
    output = tmp_path / 'out' / 'copy.txt'

    result = cluster_client.get_file('3,01637037d6', str(output))

    assert 'Downloaded: 3,01637037d6 (12 B)' in result
    assert output.read_bytes() == b'Hello World!'


def test_get_file_into_directory(cluster_client, sample_file, tmp_path):
    cluster_client.put_file(str(sample_file))
    out_dir = tmp_path / 'downloads'
    out_dir.mkdir()

    cluster_client.get_file('3,01637037d6', str(out_dir))

    assert (out_dir / '3_01637037d6').read_bytes() == b'Hello World!'


def test_get_missing_file(cluster_client, tmp_path):
    result = cluster_client.get_file('3,01637037d6', str(tmp_path / 'x'))

    assert 'File not found on volume server.' in result
    assert not (tmp_path / 'x').exists()


def test_get_unknown_volume(cluster_client, tmp_path):
    result = cluster_client.get_file('99,01637037d6', str(tmp_path / 'x'))

    assert 'Volume lookup failed' in result


def test_get_malformed_fid(cluster_client, fake_cluster):
    result = cluster_client.get_file('not-a-fid')

    assert result.startswith('Error: Invalid file id')
    assert fake_cluster.master_requests == []


def test_delete_file(cluster_client, fake_cluster, sample_file):
    cluster_client.put_file(str(sample_file))

    result = cluster_client.delete_file('3,01637037d6')

    assert result == 'Deleted: 3,01637037d6 (Size: 12 B)'
    assert fake_cluster.blobs == {}


def test_delete_missing_file(cluster_client):
    assert 'File not found on volume server.' in cluster_client.delete_file('3,01637037d6')


def test_lookup(cluster_client):
    result = cluster_client.lookup('3')

    assert result == 'Volume 3 is served by 1 location(s):\n  - 127.0.0.1:8080'


def test_lookup_shows_public_url(temp_config):
    def master(request):
        return httpx.Response(200, json={
            'volumeId': '4',
            'locations': [{'url': '10.0.0.7:8080', 'publicUrl': 'vol.example.com:80'}],
        })

    client = ClusterClient(temp_config, master_transport=httpx.MockTransport(master))

    assert '  - 10.0.0.7:8080 (public: vol.example.com:80)' in client.lookup('4')


def test_lookup_rejects_non_numeric(cluster_client, fake_cluster):
    assert cluster_client.lookup('abc').startswith('Error: Volume id must be')
    assert fake_cluster.master_requests == []


def test_set_master(cluster_client):
    assert cluster_client.set_master() == 'Master: http://localhost:9333'

    assert cluster_client.set_master('10.0.0.5:19333') == 'Master set to http://10.0.0.5:19333'
    assert cluster_client.master.config.get_base_url() == 'http://10.0.0.5:19333'


def test_set_master_malformed(cluster_client):
    assert cluster_client.set_master('nowhere').startswith('Error: Invalid address')
    assert cluster_client.set_master() == 'Master: http://localhost:9333'


def test_set_master_https_is_used_for_requests(temp_config, fake_cluster):
    client = ClusterClient(temp_config, master_transport=fake_cluster.master_transport)

    assert client.set_master('https://master.example:9333') == 'Master set to https://master.example:9333'
    client.lookup('3')

    url = fake_cluster.master_requests[0].url
    assert url.scheme == 'https'
    assert url.host == 'master.example'
    assert url.port == 9333
