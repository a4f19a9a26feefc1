"""Installed version of the Vantage distribution."""

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    try:
        return version("vantage")
    except PackageNotFoundError:
        return "0.0.0"
