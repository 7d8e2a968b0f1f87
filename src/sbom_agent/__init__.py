"""sbom_agent package: render SPDX and CycloneDX SBOMs for an apk image layer.

The generator only needs the layer digest, the target architecture and the
installed package list, so it can run apart from the layer build itself.
"""
from .builder import build_cyclonedx_sbom, canonicalize_sbom  # noqa: F401
from .generator import RENDERERS, SBOM  # noqa: F401
from .models import ImageInfo, Options, OSInfo  # noqa: F401
from .spdx import build_spdx_sbom  # noqa: F401
