"""Model-to-document dependency tracking.

For some model file keyed by its path relative to the models root,
``DEPENDENCIES.dependencies_of(key)`` lists the documents known to read that
model, directly or through imports. A watcher uses it to recompile the
affected documents when a model file changes.
"""

import threading
from typing import Dict, Iterable, List


class DependencyTracker:
    """Maps model keys to the documents that depend on them."""

    def __init__(self):
        # Maps model key -> documents that read it, without repeats
        self._dependents: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    def add_dependency(self, model_key: str, document_path: str) -> None:
        """Record that ``document_path`` reads the model at ``model_key``.

        Args:
            model_key: Model path relative to the models root
            document_path: Documentation file path
        """
        with self._lock:
            existing = self._dependents.setdefault(model_key, [])
            if document_path not in existing:
                existing.append(document_path)

    def dependencies_of(self, model_key: str) -> List[str]:
        """Get the documents that depend on a model.

        Args:
            model_key: Model path relative to the models root

        Returns:
            Document paths, empty if nothing depends on the model
        """
        with self._lock:
            return list(self._dependents.get(model_key, []))

    def documents_for(self, model_keys: Iterable[str]) -> List[str]:
        """Get every document affected by a set of changed models."""
        documents: List[str] = []
        with self._lock:
            for key in model_keys:
                for document_path in self._dependents.get(key, []):
                    if document_path not in documents:
                        documents.append(document_path)
        return documents

    def items(self) -> Dict[str, List[str]]:
        """Snapshot of the whole map."""
        with self._lock:
            return {key: list(value) for key, value in self._dependents.items()}

    def clear(self) -> None:
        with self._lock:
            self._dependents.clear()

    def __contains__(self, model_key: str) -> bool:
        with self._lock:
            return model_key in self._dependents

    def __len__(self) -> int:
        with self._lock:
            return len(self._dependents)


DEPENDENCIES = DependencyTracker()


def add_dependency(model_key: str, document_path: str) -> None:
    DEPENDENCIES.add_dependency(model_key, document_path)


def dependencies_of(model_key: str) -> List[str]:
    return DEPENDENCIES.dependencies_of(model_key)
