"""Top-level package for the Qudrat question importer.

Provides subpackages:
- qudrat_toolkit.core – immutable data models (crop boxes, questions, tests)
- qudrat_toolkit.calibration – crop-region calibration and persistence
- qudrat_toolkit.extractor – page rendering, answer detection and batch conversion
- qudrat_toolkit.storage – test repositories consumed by the batch converter
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            for line in pyproject.read_text().splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    try:
        from importlib.metadata import version as pkg_version
        return pkg_version("qudrat_toolkit")
    except Exception:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
