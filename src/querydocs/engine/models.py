"""Data models for compiled documentation models."""

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class DefinitionKind(str, Enum):
    SOURCE = 'source'
    EXPLORE = 'explore'
    QUERY = 'query'
    SQL_BLOCK = 'sql'


class Definition(BaseModel):
    """A named declaration in a model."""

    model_config = ConfigDict(frozen=True)

    kind: DefinitionKind
    name: str
    sql: str  # Compiled, self-contained SQL
    raw_sql: str = ''  # Statement body as written
    tags: Tuple[str, ...] = ()
    queries: Dict[str, 'Definition'] = Field(default_factory=dict)  # Queries nested in an explore
    origin: Optional[str] = None  # URL of the declaring document


class ModelDef(BaseModel):
    """Snapshot of a model, passed by value between notebook blocks."""

    model_config = ConfigDict(frozen=True)

    contents: Dict[str, Definition] = Field(default_factory=dict)
    exports: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()  # Annotations of the latest document
    query_list: Tuple[Definition, ...] = ()  # Queries of the latest document, in order

    @classmethod
    def empty(cls) -> 'ModelDef':
        return cls()
