import threading
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from .catalogue_config import CatalogueLoader
from .models import SkillCatalogue


class CatalogueStore:
    """Caches validated catalogue snapshots until explicitly invalidated.

    Snapshots are immutable, so one may be shared by any number of
    concurrent evaluations. Operator edits call :meth:`invalidate`.
    """

    def __init__(self, loader: Optional[CatalogueLoader] = None):
        self.loader = loader or CatalogueLoader()
        self._snapshots: Dict[Tuple[str, str], SkillCatalogue] = {}
        self._lock = threading.Lock()

    def snapshot(self, path: Union[str, Path], environment: str = "default") -> SkillCatalogue:
        """Return the cached catalogue for ``path``, loading it on first use."""
        key = (str(Path(path).resolve()), environment)
        with self._lock:
            cached = self._snapshots.get(key)
            if cached is not None:
                return cached

        catalogue = self.loader.load(path, environment)
        with self._lock:
            return self._snapshots.setdefault(key, catalogue)

    def invalidate(self, path: Optional[Union[str, Path]] = None):
        """Drop cached snapshots for ``path``, or all of them."""
        with self._lock:
            if path is None:
                self._snapshots.clear()
                return
            resolved = str(Path(path).resolve())
            for key in [k for k in self._snapshots if k[0] == resolved]:
                del self._snapshots[key]

    def is_cached(self, path: Union[str, Path], environment: str = "default") -> bool:
        with self._lock:
            return (str(Path(path).resolve()), environment) in self._snapshots
