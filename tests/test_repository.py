import gc

import pytest

from apklayer.apk.index import APKIndex, Package
from apklayer.apk.repository import Repository, RepositoryPackage


def _index():
    return APKIndex(packages=[
        Package(name="foo", version="1.0", arch="x86_64"),
        Package(name="bar", version="2.1-r3", arch="x86_64"),
        Package(name="abc", version="0.1", arch="x86_64"),
    ])


def test_repository_from_components():
    repo = Repository.from_components("http://x", "r", "main", "x86_64")
    assert repo.uri == "http://x/r/main/x86_64"
    assert repo.index_uri() == "http://x/r/main/x86_64/APKINDEX.tar.gz"
    assert repo.is_remote()
    assert "/".join(repo.uri.split("/")[-2:]) == "main/x86_64"


def test_local_repository_is_not_remote():
    assert not Repository(uri="/local/repo").is_remote()
    assert Repository(uri="https://dl-cdn.alpinelinux.org/alpine/v3.18/main/x86_64").is_remote()


def test_trailing_slash_is_dropped():
    repo = Repository(uri="http://x/r/main/x86_64/")
    assert repo.uri == "http://x/r/main/x86_64"
    assert repo.index_uri() == "http://x/r/main/x86_64/APKINDEX.tar.gz"


def test_repo_abbr_and_count():
    rwi = Repository(uri="http://x/r/main/x86_64").with_index(_index())
    assert rwi.repo_abbr() == "main/x86_64"
    assert rwi.count() == 3


def test_packages_keep_index_order_and_urls():
    rwi = Repository(uri="http://x/r/main/x86_64").with_index(_index())
    pkgs = rwi.packages()
    assert [p.name for p in pkgs] == ["foo", "bar", "abc"]
    assert pkgs[0].url() == "http://x/r/main/x86_64/foo-1.0.apk"
    assert pkgs[1].url() == "http://x/r/main/x86_64/bar-2.1-r3.apk"
    assert all(p.repository() is rwi for p in pkgs)


def test_repository_package_url():
    rwi = Repository(uri="http://x/r/main/x86_64").with_index(APKIndex())
    rp = RepositoryPackage(Package(name="foo", version="1.0"), rwi)
    assert rp.package.filename() == "foo-1.0.apk"
    assert rp.url() == "http://x/r/main/x86_64/foo-1.0.apk"
    assert rp.version == "1.0"


def test_package_does_not_keep_repository_alive():
    rwi = Repository(uri="http://x/r/main/x86_64").with_index(_index())
    pkg = rwi.packages()[0]
    del rwi
    gc.collect()
    with pytest.raises(ReferenceError):
        pkg.repository()
    assert pkg.url() == "http://x/r/main/x86_64/foo-1.0.apk"


def test_url_from_chained_calls():
    url = Repository(uri="http://x/r/main/x86_64").with_index(_index()).packages()[0].url()
    assert url == "http://x/r/main/x86_64/foo-1.0.apk"
