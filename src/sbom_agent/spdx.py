"""SPDX 2.3 JSON rendering of an image layer SBOM."""
from __future__ import annotations

import hashlib
import re
from datetime import timezone
from typing import Any

from apklayer.apk.index import Package

from .builder import TOOL_NAME, TOOL_VERSION, package_purl
from .models import Options

NOASSERTION = "NOASSERTION"

_ID_UNSAFE = re.compile(r"[^a-zA-Z0-9.-]")


def _spdx_id(kind: str, value: str) -> str:
    return f"SPDXRef-{kind}-{_ID_UNSAFE.sub('-', value)}"


def _package_entry(pkg: Package, os_id: str) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "SPDXID": _spdx_id("Package", f"{pkg.name}-{pkg.version}"),
        "name": pkg.name,
        "versionInfo": pkg.version,
        "filesAnalyzed": False,
        "downloadLocation": NOASSERTION,
        "licenseConcluded": NOASSERTION,
        "licenseDeclared": pkg.license or NOASSERTION,
        "copyrightText": NOASSERTION,
        "supplier": f"Organization: {os_id}",
        "externalRefs": [{
            "referenceCategory": "PACKAGE-MANAGER",
            "referenceType": "purl",
            "referenceLocator": package_purl(pkg, os_id),
        }],
    }
    if pkg.description:
        entry["description"] = pkg.description
    if pkg.origin:
        entry["sourceInfo"] = f"built from origin package {pkg.origin}"
    return entry


def build_spdx_sbom(opts: Options) -> dict[str, Any]:
    info = opts.image_info
    os_id = opts.os.id
    digest_hex = info.digest.removeprefix("sha256:")
    image_id = _spdx_id("Image", digest_hex[:16] or "unknown")

    image: dict[str, Any] = {
        "SPDXID": image_id,
        "name": info.name or info.digest,
        "versionInfo": info.digest,
        "filesAnalyzed": False,
        "downloadLocation": NOASSERTION,
        "licenseConcluded": NOASSERTION,
        "licenseDeclared": NOASSERTION,
        "copyrightText": NOASSERTION,
        "primaryPackagePurpose": "CONTAINER",
        "checksums": [{"algorithm": "SHA256", "checksumValue": digest_hex}],
        "comment": f"arch: {info.arch}" if info.arch else "",
    }
    if info.tag:
        image["externalRefs"] = [{
            "referenceCategory": "PACKAGE-MANAGER",
            "referenceType": "purl",
            "referenceLocator": f"pkg:oci/{info.name.rsplit(':', 1)[0].rsplit('/', 1)[-1]}@{info.digest}?tag={info.tag}",
        }]

    packages = [_package_entry(pkg, os_id) for pkg in opts.packages]
    relationships = [{
        "spdxElementId": "SPDXRef-DOCUMENT",
        "relationshipType": "DESCRIBES",
        "relatedSpdxElement": image_id,
    }]
    relationships += [{
        "spdxElementId": image_id,
        "relationshipType": "CONTAINS",
        "relatedSpdxElement": p["SPDXID"],
    } for p in packages]

    namespace_seed = hashlib.sha256(info.digest.encode("utf-8")).hexdigest()
    return {
        "spdxVersion": "SPDX-2.3",
        "dataLicense": "CC0-1.0",
        "SPDXID": "SPDXRef-DOCUMENT",
        "name": f"sbom-{info.name or info.digest}",
        "documentNamespace": f"https://spdx.org/spdxdocs/apklayer/{namespace_seed}",
        "creationInfo": {
            "created": opts.source_date_epoch.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "creators": [f"Tool: {TOOL_NAME}-{TOOL_VERSION}"],
            "licenseListVersion": "3.21",
        },
        "packages": [image] + packages,
        "relationships": relationships,
    }
