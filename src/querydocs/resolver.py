"""Content resolution for model and document URLs."""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from querydocs.config import Settings, get_settings
from querydocs.dependencies import DEPENDENCIES, DependencyTracker
from querydocs.exceptions import ResourceNotFoundError
from querydocs.styles import DataStyles, data_styles_for_file, merge_styles, strip_file_scheme

logger = logging.getLogger(__name__)


class FileStorage:
    """Read-only access to files on the local filesystem."""

    def read_text(self, path: str) -> str:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except (FileNotFoundError, IsADirectoryError) as e:
            raise ResourceNotFoundError(path) from e


@dataclass(frozen=True)
class InMemory:
    """Content supplied by the caller, such as a notebook block being run."""

    content: str


@dataclass(frozen=True)
class FromStorage:
    """Content that lives in a file."""

    path: str


Location = Union[InMemory, FromStorage]


class DocsURLReader:
    """
    Serves model contents for the document at ``document_path``.

    Every file read from storage records a dependency of the document on that
    file and merges the styles it declares into ``data_styles``. URLs present
    in ``in_memory_urls`` are served verbatim without either side effect.
    """

    def __init__(
        self,
        document_path: str,
        in_memory_urls: Optional[Mapping[str, str]] = None,
        settings: Optional[Settings] = None,
        tracker: Optional[DependencyTracker] = None,
        storage: Optional[FileStorage] = None,
    ):
        self.document_path = document_path
        self.in_memory_urls = dict(in_memory_urls or {})
        self.settings = settings or get_settings()
        self.tracker = tracker if tracker is not None else DEPENDENCIES
        self.storage = storage if storage is not None else FileStorage()
        self._data_styles: DataStyles = {}

    def locate(self, url: str) -> Location:
        if url in self.in_memory_urls:
            return InMemory(self.in_memory_urls[url])
        return FromStorage(strip_file_scheme(url))

    def read_url(self, url: str) -> str:
        location = self.locate(url)
        if isinstance(location, InMemory):
            return location.content

        contents = self.storage.read_text(location.path)
        self.tracker.add_dependency(self.settings.model_key(location.path), self.document_path)
        self._data_styles = merge_styles(self._data_styles, data_styles_for_file(url, contents, self.storage))
        logger.debug(f'Resolved {location.path} for {self.document_path}')
        return contents

    @property
    def data_styles(self) -> DataStyles:
        """Styles accumulated from every file read so far."""
        return dict(self._data_styles)
