from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _version

try:
    __version__ = _version(__name__)
except PackageNotFoundError:
    __version__ = "unknown"

from . import datasets, fitting, models

__all__ = []
