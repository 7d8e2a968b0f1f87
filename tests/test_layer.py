import gzip
import hashlib

import pytest

from apklayer.errors import LayerFormatError
from apklayer.oci.layer import layer_from_file


def test_digest_is_sha256_of_compressed_bytes(tmp_path):
    payload = gzip.compress(b"tar bytes", mtime=0)
    p = tmp_path / "layer.tar.gz"
    p.write_bytes(payload)
    layer = layer_from_file(p)
    assert layer.digest() == "sha256:" + hashlib.sha256(payload).hexdigest()
    assert layer.diff_id() == "sha256:" + hashlib.sha256(b"tar bytes").hexdigest()
    assert layer.size() == len(payload)


def test_rejects_uncompressed_input(tmp_path):
    p = tmp_path / "layer.tar"
    p.write_bytes(b"not gzip at all")
    with pytest.raises(LayerFormatError):
        layer_from_file(p)


def test_missing_file(tmp_path):
    with pytest.raises(LayerFormatError, match="cannot read layer"):
        layer_from_file(tmp_path / "nope.tar.gz")
