from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field

from sbom_agent import SBOM

from ..errors import ApkLayerError, ArchiveError, EnvironmentSetupError, LayerFormatError, SBOMError
from ..exec.executor import ExecutionStrategy, Executor
from ..oci.layer import layer_from_file
from ..oci.name import Tag
from ..s6.supervision import InitContext
from ..tarball.writer import TarballWriter
from .options import BuildOptions
from .types import Architecture

TARBALL_PREFIX = "apklayer-"
TARBALL_SUFFIX = ".tar.gz"


def temp_tarball_prefix() -> str:
    return os.path.join(tempfile.gettempdir(), TARBALL_PREFIX)


def select_strategy(options: BuildOptions, host: Architecture) -> ExecutionStrategy:
    if not options.use_proot:
        return ExecutionStrategy.native()
    if not options.arch.compatible(host):
        options.log.warning("%s requires QEMU (not compatible with %s)", options.arch, host)
        return ExecutionStrategy.proot_qemu(options.arch.to_qemu())
    return ExecutionStrategy.proot()


def refresh(options: BuildOptions, host: Architecture | None = None) -> tuple[InitContext, Executor]:
    """Prepare execution handles for the build root."""
    # A path generated by an earlier build must not be reused
    if options.tarball_path.startswith(temp_tarball_prefix()):
        options.tarball_path = ""

    strategy = select_strategy(options, host or Architecture.host())
    try:
        executor = Executor(options.work_dir, options.log, strategy)
    except EnvironmentSetupError as e:
        raise EnvironmentSetupError(f"setting up {strategy.mode.value} execution for {options.work_dir}: {e}") from e
    return InitContext(options.work_dir, options.log), executor


def build_tarball(options: BuildOptions) -> Path:
    """Serialize the build root into a layer tarball and record its path in *options*."""
    try:
        if options.tarball_path:
            name = options.tarball_path
            outfile = open(name, "wb")
        else:
            fd, name = tempfile.mkstemp(prefix=TARBALL_PREFIX, suffix=TARBALL_SUFFIX)
            outfile = os.fdopen(fd, "wb")
    except OSError as e:
        raise ArchiveError(f"opening the build context tarball path failed: {e}") from e

    path = Path(name)
    options.tarball_path = str(name)
    with outfile:
        writer = TarballWriter(source_date_epoch=options.source_date_epoch)
        try:
            writer.write_archive(outfile, options.work_dir)
        except OSError as e:
            raise ArchiveError(f"failed to generate tarball for image: {e}") from e

    options.log.info("built image layer tarball as %s", path)
    return path


def generate_sbom(options: BuildOptions, tarball_path: Path | str | None = None) -> list[Path]:
    """Write the requested SBOM documents for the built layer."""
    if not options.sbom_formats:
        options.log.info("skipping SBOM generation")
        return []
    options.log.info("generating SBOM")

    try:
        s = SBOM.with_work_dir(options.work_dir, options.arch)
    except SBOMError as e:
        raise SBOMError(f"reading release data from {options.work_dir}: {e}") from e

    path = tarball_path or options.tarball_path
    if not path:
        raise SBOMError("no layer tarball to describe; build the tarball first")
    try:
        layer = layer_from_file(path)
        digest = layer.digest()
    except (OSError, LayerFormatError) as e:
        raise SBOMError(f"failed to create OCI layer from {path}: {e}") from e

    info = s.options.image_info
    # Only the first tag names the image in the SBOM
    if options.tags:
        try:
            tag = Tag.parse(options.tags[0])
        except ValueError as e:
            raise SBOMError(f"parsing tag {options.tags[0]}: {e}") from e
        info.tag = tag.tag_str()
        info.name = str(tag)

    try:
        packages = s.read_package_index()
    except ApkLayerError as e:
        raise SBOMError(f"getting installed packages from sbom: {e}") from e

    info.arch = options.arch
    info.digest = digest
    s.options.output_dir = options.sbom_path
    s.options.packages = packages
    s.options.formats = list(options.sbom_formats)
    s.options.source_date_epoch = options.source_date_epoch

    try:
        return s.generate()
    except SBOMError as e:
        raise SBOMError(f"generating SBOMs: {e}") from e


class BuildImplementation(Protocol):
    def refresh(self, options: BuildOptions) -> tuple[InitContext, Executor]: ...

    def build_tarball(self, options: BuildOptions) -> Path: ...

    def generate_sbom(self, options: BuildOptions, tarball_path: Path | str | None = None) -> list[Path]: ...


class DefaultBuildImplementation:
    def refresh(self, options: BuildOptions) -> tuple[InitContext, Executor]:
        return refresh(options)

    def build_tarball(self, options: BuildOptions) -> Path:
        return build_tarball(options)

    def generate_sbom(self, options: BuildOptions, tarball_path: Path | str | None = None) -> list[Path]:
        return generate_sbom(options, tarball_path)


class BuildResult(BaseModel):
    tarball_path: Path
    sbom_paths: list[Path] = Field(default_factory=list)


def build_layer(options: BuildOptions, impl: BuildImplementation | None = None) -> BuildResult:
    """Run all three stages, passing the tarball path from the archive stage to the SBOM stage."""
    impl = impl or DefaultBuildImplementation()
    impl.refresh(options)
    tarball = impl.build_tarball(options)
    sboms = impl.generate_sbom(options, tarball)
    return BuildResult(tarball_path=tarball, sbom_paths=sboms)
