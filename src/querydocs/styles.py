"""Data styles declared by ``--! styles <file>`` lines."""

import json
import os
from typing import Any, Dict, Mapping, Optional

from querydocs.exceptions import StylesError

STYLES_PREFIX = '--! styles '

DataStyles = Dict[str, Dict[str, Any]]


def merge_styles(base: Optional[Mapping[str, Any]], overlay: Optional[Mapping[str, Any]]) -> DataStyles:
    """Shallow merge of two style maps; ``overlay`` wins on a shared field."""
    merged: DataStyles = dict(base or {})
    merged.update(overlay or {})
    return merged


def strip_file_scheme(url: str) -> str:
    return url[len('file://') :] if url.startswith('file://') else url


def parse_styles(text: str, path: str) -> DataStyles:
    try:
        styles = json.loads(text)
    except json.JSONDecodeError as e:
        raise StylesError(f'Invalid JSON in styles file {path}: {e}') from e
    if not isinstance(styles, dict):
        raise StylesError(f'Styles file {path} must contain a JSON object')
    return styles


def data_styles_for_file(url: str, text: str, storage) -> DataStyles:
    """Collect the styles declared at the top of a document.

    Args:
        url: URL of the document, styles files resolve relative to it
        text: Document contents
        storage: Object with ``read_text(path)`` used to fetch styles files

    Returns:
        Styles from every directive, later directives winning
    """
    styles: DataStyles = {}
    for line in text.split('\n'):
        if line.startswith(STYLES_PREFIX):
            file_name = line.rstrip()[len(STYLES_PREFIX) :]
            styles_path = os.path.normpath(os.path.join(strip_file_scheme(url), '..', file_name))
            styles = merge_styles(styles, parse_styles(storage.read_text(styles_path), styles_path))
    return styles
