from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .apk.index import read_installed
from .build.implementation import build_layer
from .build.options import BuildOptions
from .errors import ApkLayerError
from .oci.layer import layer_from_file
from .settings import settings


def cmd_build_layer(ns: argparse.Namespace) -> int:
    opts = BuildOptions.from_settings(
        Path(ns.workdir),
        ns.arch,
        tarball_path=ns.output or "",
        tags=ns.tag,
        sbom_formats=ns.sbom_format,
        sbom_path=Path(ns.sbom_path) if ns.sbom_path else None,
        use_proot=True if ns.use_proot else None,
    )
    result = build_layer(opts)
    print(result.tarball_path)
    for p in result.sbom_paths:
        print(p)
    return 0


def cmd_digest(ns: argparse.Namespace) -> int:
    layer = layer_from_file(ns.tarball)
    print(layer.digest())
    return 0


def cmd_packages(ns: argparse.Namespace) -> int:
    for pkg in read_installed(ns.workdir):
        print(f"{pkg.name}-{pkg.version} {pkg.arch}".rstrip())
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="apklayer", description="Reproducible apk image layer and SBOM builder")
    sub = p.add_subparsers(dest="cmd", required=True)

    build_p = sub.add_parser("build-layer", help="Build the layer tarball and SBOMs for a build root")
    build_p.add_argument("--workdir", required=True, help="Prepared build root")
    build_p.add_argument("--arch", required=True, help="Target architecture (e.g. x86_64, arm64)")
    build_p.add_argument("--output", help="Tarball path (default: a new temporary file)")
    build_p.add_argument("--tag", action="append", default=None, help="Image tag; the first one names the SBOM image")
    build_p.add_argument("--sbom-format", action="append", default=None, choices=["spdx", "cyclonedx"])
    build_p.add_argument("--sbom-path", help="Directory for SBOM documents")
    build_p.add_argument("--use-proot", action="store_true", help="Run build root commands through proot")
    build_p.set_defaults(func=cmd_build_layer)

    digest_p = sub.add_parser("digest", help="Print the layer digest of a tarball")
    digest_p.add_argument("tarball")
    digest_p.set_defaults(func=cmd_digest)

    pkgs_p = sub.add_parser("packages", help="List packages installed in a build root")
    pkgs_p.add_argument("--workdir", required=True)
    pkgs_p.set_defaults(func=cmd_packages)

    return p


def main(argv: list[str] | None = None) -> int:
    ns = build_parser().parse_args(argv)
    logging.basicConfig(level=settings.apklayer_log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    try:
        return ns.func(ns)
    except ApkLayerError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
