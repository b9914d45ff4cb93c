"""goose-review — cached, concurrent AI code review for whole projects."""

from goosereview.version import __version__

__all__ = ["__version__"]
