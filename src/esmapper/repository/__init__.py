"""Repository layer — Per-index Loader and Searcher."""

from esmapper.repository.loader import Loader
from esmapper.repository.searcher import Searcher, build_sort, new_default_search_loader, new_search_loader

__all__ = ["Loader", "Searcher", "build_sort", "new_default_search_loader", "new_search_loader"]
