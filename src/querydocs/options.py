"""Run options attached to documentation snippets.

Snippets may start with a magic comment carrying the options as JSON::

    --! {"source": "flights.docmodel", "pageSize": 10, "showAs": "sql"}
"""

import json
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from querydocs.exceptions import ConfigError

OPTIONS_PREFIX = '--! {'


class LocatorMode(str, Enum):
    """How the runnable object is found in a snippet's model."""

    SQL_BLOCK = 'sql_block'
    EXPLORE_QUERY = 'explore_query'
    NAMED_QUERY = 'named_query'
    RAW = 'raw'


class RunOptions(BaseModel):
    """Options for running one snippet."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    source: Optional[str] = None
    size: Optional[str] = None
    page_size: Optional[int] = Field(default=None, alias='pageSize')
    data_styles: Dict[str, Dict[str, Any]] = Field(default_factory=dict, alias='dataStyles')
    show_as: Optional[Literal['html', 'json', 'sql']] = Field(default=None, alias='showAs')
    query_name: Optional[str] = Field(default=None, alias='queryName')
    sql_block_name: Optional[str] = Field(default=None, alias='sqlBlockName')
    explore_name: Optional[str] = Field(default=None, alias='exploreName')
    is_hidden: bool = Field(default=False, alias='isHidden')

    @model_validator(mode='after')
    def _check_locator(self) -> 'RunOptions':
        if self.sql_block_name and (self.query_name or self.explore_name):
            raise ValueError('sqlBlockName cannot be combined with queryName or exploreName')
        if self.explore_name and not self.query_name:
            raise ValueError('exploreName requires queryName')
        return self

    @property
    def locator_mode(self) -> LocatorMode:
        if self.sql_block_name:
            return LocatorMode.SQL_BLOCK
        if self.query_name and self.explore_name:
            return LocatorMode.EXPLORE_QUERY
        if self.query_name:
            return LocatorMode.NAMED_QUERY
        return LocatorMode.RAW

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RunOptions':
        """Validate options, raising ConfigError instead of a pydantic error."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f'Invalid run options: {e}') from e


def options_from_snippet(code: str) -> Tuple[RunOptions, str]:
    """Split a leading ``--! {...}`` magic comment off a snippet.

    Returns:
        Tuple of (options, code without the magic comment line)
    """
    first_line, _, rest = code.partition('\n')
    if not first_line.startswith(OPTIONS_PREFIX):
        return RunOptions(), code

    try:
        data = json.loads(first_line[len('--! ') :])
    except json.JSONDecodeError as e:
        raise ConfigError(f'Invalid options comment {first_line!r}: {e}') from e
    if not isinstance(data, dict):
        raise ConfigError(f'Options comment must hold a JSON object: {first_line!r}')
    return RunOptions.from_dict(data), rest
