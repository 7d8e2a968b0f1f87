from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from ..errors import TagParseError

DEFAULT_REGISTRY = "index.docker.io"
DEFAULT_TAG = "latest"

_COMPONENT = r"[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*"
_REPOSITORY_RE = re.compile(rf"^{_COMPONENT}(?:/{_COMPONENT})*$")
_TAG_RE = re.compile(r"^[\w][\w.-]{0,127}$")
_REGISTRY_RE = re.compile(r"^[a-zA-Z0-9.-]+(?::[0-9]+)?$")


class Tag(BaseModel):
    """A parsed ``[registry/]repository[:tag]`` image reference."""

    model_config = ConfigDict(frozen=True)

    registry: str
    repository: str
    tag: str

    @classmethod
    def parse(cls, ref: str) -> "Tag":
        if not ref:
            raise TagParseError("empty image reference")
        if "@" in ref:
            raise TagParseError(f"{ref!r} is a digest reference, expected a tag")

        registry = ""
        rest = ref
        parts = ref.split("/", 1)
        if len(parts) == 2 and ("." in parts[0] or ":" in parts[0] or parts[0] == "localhost"):
            registry, rest = parts

        tag = DEFAULT_TAG
        # A colon after the last slash separates the tag
        idx = rest.rfind(":")
        if idx != -1 and "/" not in rest[idx:]:
            rest, tag = rest[:idx], rest[idx + 1:]

        if registry and not _REGISTRY_RE.match(registry):
            raise TagParseError(f"invalid registry {registry!r} in {ref!r}")
        if not _REPOSITORY_RE.match(rest):
            raise TagParseError(f"invalid repository {rest!r} in {ref!r}")
        if not _TAG_RE.match(tag):
            raise TagParseError(f"invalid tag {tag!r} in {ref!r}")

        if not registry:
            registry = DEFAULT_REGISTRY
        if registry in (DEFAULT_REGISTRY, "docker.io") and "/" not in rest:
            rest = f"library/{rest}"
        if registry == "docker.io":
            registry = DEFAULT_REGISTRY
        return cls(registry=registry, repository=rest, tag=tag)

    def registry_str(self) -> str:
        return self.registry

    def repository_str(self) -> str:
        return self.repository

    def tag_str(self) -> str:
        return self.tag

    def name(self) -> str:
        return f"{self.registry}/{self.repository}:{self.tag}"

    def __str__(self) -> str:
        return self.name()
