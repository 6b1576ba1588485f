"""treesnap: point-in-time snapshots of a directory tree."""

from .constants import TREESNAP_VERSION as __version__

__all__ = ["__version__"]
