"""apklayer: build a reproducible image layer from an apk build root and record its SBOM."""
