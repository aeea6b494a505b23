"""
Version information for the AICraft SDK.

Installed builds report the distribution metadata; a source checkout reads
``pyproject.toml`` next to the package.
"""
import importlib.metadata
import pathlib

import tomli

DISTRIBUTION = "aicraft-sdk"
DEFAULT_VERSION = "0.1.0"


def _pyproject_version(path: pathlib.Path) -> str:
    try:
        with path.open("rb") as f:
            return tomli.load(f)["project"]["version"]
    except (FileNotFoundError, KeyError, tomli.TOMLDecodeError):
        return DEFAULT_VERSION


try:
    __version__ = importlib.metadata.version(DISTRIBUTION)
except importlib.metadata.PackageNotFoundError:
    __version__ = _pyproject_version(pathlib.Path(__file__).parent.parent / "pyproject.toml")
