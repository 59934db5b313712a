"""render-kit: view rendering for FastAPI controllers."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("render-kit")
except PackageNotFoundError:
    __version__ = "dev"
