"""TypeGap - TypeScript declarations and client stubs from reflected type metadata."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("typegap")
except PackageNotFoundError:
    __version__ = "(local)"
