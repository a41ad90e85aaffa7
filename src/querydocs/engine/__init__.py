"""Model compilation and execution for documentation snippets."""

from querydocs.engine.compiler import Compiler
from querydocs.engine.models import Definition, DefinitionKind, ModelDef
from querydocs.engine.parser import ParsedDocument, Statement, parse_document
from querydocs.engine.runtime import (
    Explore,
    Model,
    PreparedQuery,
    PreparedSQLBlock,
    Result,
    Runnable,
    Runtime,
)
from querydocs.engine.tags import parse_tags, select_tags

__all__ = [
    'Compiler',
    'Definition',
    'DefinitionKind',
    'Explore',
    'Model',
    'ModelDef',
    'ParsedDocument',
    'PreparedQuery',
    'PreparedSQLBlock',
    'Result',
    'Runnable',
    'Runtime',
    'Statement',
    'parse_document',
    'parse_tags',
    'select_tags',
]
