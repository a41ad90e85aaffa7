"""Model loading and query execution on top of a DuckDB connection."""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin

import pyarrow as pa

from querydocs.connections import DuckDBConnection
from querydocs.engine.compiler import Compiler
from querydocs.engine.models import Definition, DefinitionKind, ModelDef
from querydocs.engine.parser import Statement, parse_document
from querydocs.exceptions import CompilationError, ObjectNotFoundError

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r'^[A-Za-z_]\w*$')


@dataclass
class Result:
    """Rows returned by a query, with the SQL that produced them."""

    data: pa.Table
    sql: str

    @property
    def schema(self) -> pa.Schema:
        return self.data.schema

    @property
    def total_rows(self) -> int:
        return self.data.num_rows


class Runnable:
    """Compiled SQL bound to a connection."""

    def __init__(self, name: str, sql: str, tags: Tuple[str, ...], connection: DuckDBConnection):
        self.name = name
        self.sql = sql
        self.tags = tags
        self._connection = connection

    def run(self, row_limit: Optional[int] = None) -> Result:
        data = self._connection.run_sql(self.sql, row_limit)
        return Result(data=data, sql=self.sql)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.name!r})'


class PreparedQuery(Runnable):
    pass


class PreparedSQLBlock(Runnable):
    pass


class Explore:
    """A named view over a source, holding its own queries."""

    def __init__(self, model: 'Model', definition: Definition):
        self.model = model
        self.definition = definition

    @property
    def name(self) -> str:
        return self.definition.name

    def query(self, name: str) -> PreparedQuery:
        definition = self.definition.queries.get(name)
        if definition is None:
            raise ObjectNotFoundError(f'Query "{name}" not found in explore "{self.name}"')
        return PreparedQuery(name, definition.sql, definition.tags, self.model.connection)


class Model:
    """A compiled model, ready to hand out runnable queries."""

    def __init__(self, model_def: ModelDef, connection: DuckDBConnection):
        self.model_def = model_def
        self.connection = connection

    @property
    def tags(self) -> Tuple[str, ...]:
        return self.model_def.tags

    def _lookup(self, name: str, kinds: Tuple[DefinitionKind, ...], label: str) -> Definition:
        definition = self.model_def.contents.get(name)
        if definition is None or definition.kind not in kinds:
            raise ObjectNotFoundError(f'{label} "{name}" not found in model')
        return definition

    def explore(self, name: str) -> Explore:
        return Explore(self, self._lookup(name, (DefinitionKind.EXPLORE, DefinitionKind.SOURCE), 'Explore'))

    def query(self, name: str) -> PreparedQuery:
        return self._prepare(self._lookup(name, (DefinitionKind.QUERY,), 'Query'), PreparedQuery)

    def sql_block(self, name: str) -> PreparedSQLBlock:
        return self._prepare(self._lookup(name, (DefinitionKind.SQL_BLOCK,), 'SQL block'), PreparedSQLBlock)

    def final_query(self) -> Optional[PreparedQuery]:
        """The last query of the latest document, or None if it has none."""
        if not self.model_def.query_list:
            return None
        return self._prepare(self.model_def.query_list[-1], PreparedQuery)

    def _prepare(self, definition: Definition, runnable_type):
        return runnable_type(definition.name or '<run>', definition.sql, definition.tags, self.connection)


class Runtime:
    """
    Compiles model documents read through ``url_reader`` and runs them on
    ``connection``.

    ``url_reader`` is any object with ``read_url(url) -> str``. Relative
    imports in documents without a URL resolve against ``import_base_url``.
    """

    def __init__(self, url_reader, connection: DuckDBConnection, import_base_url: Optional[str] = None):
        self.url_reader = url_reader
        self.connection = connection
        self.import_base_url = import_base_url
        self.compiler = Compiler()

    def load_model(self, text: str, url: Optional[str] = None) -> Model:
        model_def = self._translate(text, url, ModelDef.empty(), [])
        return Model(model_def, self.connection)

    def load_query(self, text: str, url: Optional[str] = None) -> PreparedQuery:
        """Compile ``text`` and return its final query."""
        query = self.load_model(text, url).final_query()
        if query is None:
            raise ObjectNotFoundError(f'No query found in {url or "snippet"}')
        return query

    def extend_model(self, model_def: ModelDef, url: str) -> Model:
        """Compile the document at ``url`` with everything in ``model_def`` in scope."""
        text = self.url_reader.read_url(url)
        extended = self._translate(text, url, model_def, [])
        return Model(extended, self.connection)

    def _translate(self, text: str, url: Optional[str], base: ModelDef, importing: List[str]) -> ModelDef:
        parsed = parse_document(text, url)
        scope: Dict[str, Definition] = dict(base.contents)
        exports: List[str] = list(base.exports)
        queries: List[Definition] = []

        for statement in parsed.statements:
            if statement.kind == 'import':
                scope.update(self._import(statement, url, importing))
                continue

            definition = self._define(statement, url, scope)
            if definition.name:
                scope[definition.name] = definition
                if definition.name not in exports:
                    exports.append(definition.name)
            else:
                # Only run: statements execute, named queries wait to be asked for
                queries.append(definition)

        logger.debug(f'Compiled {url or "snippet"}: {len(scope)} declarations, {len(queries)} queries')
        return ModelDef(
            contents=scope,
            exports=tuple(exports),
            tags=tuple(parsed.annotations),
            query_list=tuple(queries),
        )

    def _import(self, statement: Statement, url: Optional[str], importing: List[str]) -> Dict[str, Definition]:
        """Declarations exported by an imported document."""
        import_url = urljoin(url or self.import_base_url or '', statement.body)
        if import_url in importing or import_url == url:
            raise CompilationError(f'Circular import of {import_url}')

        imported = self._translate(self.url_reader.read_url(import_url), import_url, ModelDef.empty(), importing + [url or ''])
        return {name: imported.contents[name] for name in imported.exports}

    def _define(self, statement: Statement, url: Optional[str], scope: Dict[str, Definition]) -> Definition:
        """Compile one statement against the declarations visible at that point."""
        tags = tuple(statement.tags)
        if statement.kind == 'run':
            sql = self.compiler.compile(statement.body, '<run>', scope)
            return Definition(
                kind=DefinitionKind.QUERY, name='', sql=sql, raw_sql=statement.body, tags=tags, origin=url
            )

        kind = DefinitionKind(statement.kind)
        raw_sql = statement.body
        if kind == DefinitionKind.EXPLORE and IDENTIFIER_PATTERN.match(raw_sql):
            raw_sql = f"SELECT * FROM {{{{ ref('{raw_sql}') }}}}"
        sql = self.compiler.compile(raw_sql, statement.name, scope)

        definition = Definition(kind=kind, name=statement.name, sql=sql, raw_sql=raw_sql, tags=tags, origin=url)
        if statement.children:
            nested_scope = {**scope, definition.name: definition}
            queries = {}
            for child in statement.children:
                queries[child.name] = Definition(
                    kind=DefinitionKind.QUERY,
                    name=child.name,
                    sql=self.compiler.compile(child.body, child.name, nested_scope, explore=definition.name),
                    raw_sql=child.body,
                    tags=tuple(child.tags),
                    origin=url,
                )
            definition = definition.model_copy(update={'queries': queries})
        return definition
