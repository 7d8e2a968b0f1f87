from __future__ import annotations

import weakref

from pydantic import BaseModel, field_validator

from .index import APKIndex, Package

INDEX_FILENAME = "APKINDEX.tar.gz"


class Repository(BaseModel):
    uri: str

    @field_validator("uri")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if v != "/" else v

    @classmethod
    def from_components(cls, base_uri: str, release: str, repo: str, arch: str) -> "Repository":
        # No validation of the segments; callers pass well formed values.
        return cls(uri=f"{base_uri}/{release}/{repo}/{arch}")

    def index_uri(self) -> str:
        return f"{self.uri}/{INDEX_FILENAME}"

    def is_remote(self) -> bool:
        """Remote repositories have their index fetched over http(s)."""
        return not self.uri.startswith("/")

    def with_index(self, index: APKIndex) -> "RepositoryWithIndex":
        return RepositoryWithIndex(self, index)


class RepositoryWithIndex:
    """A repository together with its parsed index. The index is never modified."""

    def __init__(self, repository: Repository, index: APKIndex):
        self.repository = repository
        self._index = index

    @property
    def uri(self) -> str:
        return self.repository.uri

    def index_uri(self) -> str:
        return self.repository.index_uri()

    def is_remote(self) -> bool:
        return self.repository.is_remote()

    def packages(self) -> list["RepositoryPackage"]:
        return [RepositoryPackage(pkg, self) for pkg in self._index.packages]

    def count(self) -> int:
        return len(self._index.packages)

    def repo_abbr(self) -> str:
        """Short name made of the repository name and architecture, e.g. ``main/x86_64``."""
        return "/".join(self.uri.split("/")[-2:])


class RepositoryPackage:
    def __init__(self, package: Package, repository: RepositoryWithIndex):
        self.package = package
        self._uri = repository.uri
        # The caller that built the index owns the repository
        self._repository = weakref.ref(repository)

    def __getattr__(self, item):
        # Expose the wrapped package's fields (name, version, ...)
        if item.startswith("_"):
            raise AttributeError(item)
        return getattr(self.package, item)

    def repository(self) -> RepositoryWithIndex:
        repo = self._repository()
        if repo is None:
            raise ReferenceError(f"repository of package {self.package.name} no longer exists")
        return repo

    def url(self) -> str:
        return f"{self._uri}/{self.package.filename()}"

    def __repr__(self) -> str:
        return f"RepositoryPackage({self.package.name}-{self.package.version})"
