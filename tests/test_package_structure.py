"""Baseline tests ensuring the package layout loads correctly."""

import pymemcfg


def test_package_exports() -> None:
    for name in ("cli", "document", "formats", "image", "utils", "MemcfgError"):
        assert hasattr(pymemcfg, name), f"missing attribute: {name}"


def test_error_hierarchy() -> None:
    from pymemcfg import errors

    for name in ("ScanError", "ImageError", "HexFormatError", "BinaryFormatError", "Uf2FormatError", "MemoryMapError", "ConfigError"):
        assert issubclass(getattr(errors, name), errors.MemcfgError), name
    assert issubclass(errors.ScanError, ValueError)
