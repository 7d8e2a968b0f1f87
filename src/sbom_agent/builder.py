import json
import uuid
from datetime import timezone
from typing import Any, Dict, List

from apklayer.apk.index import Package

from .models import Options

TOOL_VENDOR = "apklayer"
TOOL_NAME = "sbom_agent"
TOOL_VERSION = "0.1.0"


def _tool_descriptor() -> Dict[str, Any]:
    return {
        "vendor": TOOL_VENDOR,
        "name": TOOL_NAME,
        "version": TOOL_VERSION,
    }


def package_purl(pkg: Package, os_id: str) -> str:
    purl = f"pkg:apk/{os_id}/{pkg.name}@{pkg.version}"
    if pkg.arch:
        purl += f"?arch={pkg.arch}"
    return purl


def _component(pkg: Package, os_id: str) -> Dict[str, Any]:
    comp: Dict[str, Any] = {
        "type": "library",
        "bom-ref": package_purl(pkg, os_id),
        "name": pkg.name,
        "version": pkg.version,
        "purl": package_purl(pkg, os_id),
    }
    if pkg.description:
        comp["description"] = pkg.description
    if pkg.license:
        comp["licenses"] = [{"expression": pkg.license}]
    props = []
    if pkg.origin:
        props.append({"name": "apk:origin", "value": pkg.origin})
    if pkg.checksum:
        props.append({"name": "apk:checksum", "value": pkg.checksum})
    if props:
        comp["properties"] = props
    return comp


def build_cyclonedx_sbom(opts: Options) -> Dict[str, Any]:
    """Build a CycloneDX 1.5 document for the image layer and its apk packages."""
    info = opts.image_info
    arch = str(info.arch) if info.arch else ""
    os_id = opts.os.id

    image: Dict[str, Any] = {
        "type": "container",
        "bom-ref": info.digest,
        "name": info.name or info.digest,
        "version": info.digest,
        "hashes": [{"alg": "SHA-256", "content": info.digest.removeprefix("sha256:")}],
        "properties": [
            {"name": "apklayer:image:arch", "value": arch},
        ],
    }
    if info.tag:
        image["properties"].append({"name": "apklayer:image:tag", "value": info.tag})

    components: List[Dict[str, Any]] = [_component(pkg, os_id) for pkg in opts.packages]

    doc: Dict[str, Any] = {
        "bomFormat": "CycloneDX",
        "specVersion": "1.5",
        # Stable across rebuilds of the same layer
        "serialNumber": f"urn:uuid:{uuid.uuid5(uuid.NAMESPACE_URL, 'apklayer:' + info.digest)}",
        "version": 1,
        "metadata": {
            "timestamp": opts.source_date_epoch.astimezone(timezone.utc).isoformat(),
            "tools": {"components": [dict(_tool_descriptor(), type="application")]},
            "component": image,
            "properties": [
                {"name": "apklayer:os:id", "value": os_id},
                {"name": "apklayer:os:name", "value": opts.os.name},
                {"name": "apklayer:os:version", "value": opts.os.version},
            ],
        },
        "components": components,
        "dependencies": [
            {"ref": info.digest, "dependsOn": [c["bom-ref"] for c in components]},
        ],
    }
    return doc


def canonicalize_sbom(doc: Dict[str, Any]) -> str:
    # Sorted keys at every level so identical inputs give identical bytes
    return json.dumps(doc, sort_keys=True, indent=2, ensure_ascii=False) + "\n"
