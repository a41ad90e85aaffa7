"""Annotation parsing.

An annotation is a line such as ``# limit=3 size=large html``: after the
marker, ``key``, ``key=value`` and ``key="quoted value"`` tokens set
properties and ``-key`` removes one.
"""

import shlex
from typing import Dict, Iterable, List, Union

from querydocs.exceptions import CompilationError

TagValue = Union[str, bool]


def select_tags(tags: Iterable[str], prefix: str, marker: str) -> List[str]:
    """Keep the annotations starting with ``prefix``, swapping it for ``marker``."""
    return [marker + tag[len(prefix) :] for tag in tags if tag.startswith(prefix)]


def parse_tags(notes: Iterable[str]) -> Dict[str, TagValue]:
    properties: Dict[str, TagValue] = {}
    for note in notes:
        body = note.lstrip('#')
        try:
            tokens = shlex.split(body)
        except ValueError as e:
            raise CompilationError(f'Invalid annotation {note!r}: {e}') from e

        for token in tokens:
            if token.startswith('-') and len(token) > 1:
                properties.pop(token[1:], None)
                continue
            key, sep, value = token.partition('=')
            properties[key] = value if sep else True
    return properties
