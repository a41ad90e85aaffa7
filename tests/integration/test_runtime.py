"""Integration tests for model loading and execution"""

import pytest

from querydocs.connections import DuckDBConnection
from querydocs.dependencies import DependencyTracker
from querydocs.engine.models import DefinitionKind, ModelDef
from querydocs.engine.runtime import PreparedQuery, PreparedSQLBlock, Runtime
from querydocs.exceptions import CompilationError, ObjectNotFoundError
from querydocs.resolver import DocsURLReader


@pytest.fixture
def runtime(docs_project, tmp_path):
    reader = DocsURLReader('guide/intro.md', settings=docs_project, tracker=DependencyTracker())
    connection = DuckDBConnection(tmp_path)
    yield Runtime(reader, connection, import_base_url=docs_project.models_url)
    connection.close()


@pytest.mark.integration
class TestRuntime:
    """Integration tests for Runtime"""

    def test_explores_with_same_named_queries(self, runtime, numbers_model):
        model = runtime.load_model('import "numbers.docmodel"')

        evens = model.explore('evens').query('top').run(row_limit=10)
        odds = model.explore('odds').query('top').run(row_limit=10)
        top_level = model.query('top').run(row_limit=20)

        assert sorted(evens.data.column('n').to_pylist()) == [0, 2, 4, 6, 8, 10, 12, 14, 16, 18]
        assert sorted(odds.data.column('n').to_pylist()) == [1, 3, 5, 7, 9, 11, 13, 15, 17, 19]
        assert sorted(top_level.data.column('n').to_pylist()) == list(range(10, 20))

    def test_sql_block(self, runtime, numbers_model):
        block = runtime.load_model('import "numbers.docmodel"').sql_block('raw_count')

        assert isinstance(block, PreparedSQLBlock)
        assert block.run().data.column('total').to_pylist() == [20]

    def test_load_query_runs_final_query(self, runtime):
        query = runtime.load_query('run: SELECT 1 AS one\nrun: SELECT 2 AS two')

        assert isinstance(query, PreparedQuery)
        result = query.run()
        assert result.schema.names == ['two']
        assert result.sql == 'SELECT 2 AS two'

    def test_load_query_without_query(self, runtime):
        with pytest.raises(ObjectNotFoundError, match='No query found'):
            runtime.load_query('source: s is SELECT 1 AS one')

    def test_named_queries_are_not_final_queries(self, runtime):
        model = runtime.load_model('query: q is SELECT 1 AS one')
        assert model.final_query() is None
        assert model.query('q').run().total_rows == 1

    def test_missing_names(self, runtime, numbers_model):
        model = runtime.load_model('import "numbers.docmodel"')
        with pytest.raises(ObjectNotFoundError, match='Explore "nope"'):
            model.explore('nope')
        with pytest.raises(ObjectNotFoundError, match='Query "nope" not found in explore "evens"'):
            model.explore('evens').query('nope')
        with pytest.raises(ObjectNotFoundError, match='SQL block "top"'):
            model.sql_block('top')

    def test_only_exported_declarations_are_imported(self, runtime, write_file):
        write_file('models/base.docmodel', 'source: base_numbers is SELECT * FROM range(3) t(n)')
        write_file('models/derived.docmodel', 'import "base.docmodel"\nsource: derived is SELECT * FROM {{ ref(\'base_numbers\') }}')

        model = runtime.load_model('import "derived.docmodel"')

        assert 'derived' in model.model_def.contents
        assert 'base_numbers' not in model.model_def.contents
        with pytest.raises(CompilationError, match='unknown reference "base_numbers"'):
            runtime.load_model('import "derived.docmodel"\nrun: SELECT * FROM {{ ref(\'base_numbers\') }}')

    def test_imports_still_resolve_inside_imported_model(self, runtime, write_file):
        write_file('models/base.docmodel', 'source: base_numbers is SELECT * FROM range(3) t(n)')
        write_file('models/derived.docmodel', 'import "base.docmodel"\nsource: derived is SELECT * FROM {{ ref(\'base_numbers\') }}')

        result = runtime.load_query('import "derived.docmodel"\nrun: SELECT count(*) AS n FROM {{ ref(\'derived\') }}').run()

        assert result.data.column('n').to_pylist() == [3]

    def test_circular_import(self, runtime, write_file):
        write_file('models/a.docmodel', 'import "b.docmodel"\nsource: a is SELECT 1 AS x')
        write_file('models/b.docmodel', 'import "a.docmodel"\nsource: b is SELECT 1 AS x')

        with pytest.raises(CompilationError, match='Circular import'):
            runtime.load_model('import "a.docmodel"')

    def test_extend_model_keeps_prior_declarations(self, docs_project, tmp_path):
        first_url = 'file:///virtual/one.md'
        second_url = 'file:///virtual/two.md'
        reader = DocsURLReader(
            'guide/nb.md',
            {first_url: 'source: numbers is SELECT * FROM range(4) t(n)', second_url: "source: big is SELECT * FROM {{ ref('numbers') }} WHERE n > 1\nrun: SELECT count(*) AS n FROM {{ ref('big') }}"},
            settings=docs_project,
            tracker=DependencyTracker(),
        )
        connection = DuckDBConnection(tmp_path)
        runtime = Runtime(reader, connection)

        first = runtime.extend_model(ModelDef.empty(), first_url)
        second = runtime.extend_model(first.model_def, second_url)

        assert set(second.model_def.contents) == {'numbers', 'big'}
        assert set(first.model_def.contents) == {'numbers'}
        assert second.model_def.contents['big'].kind == DefinitionKind.SOURCE
        assert second.final_query().run().data.column('n').to_pylist() == [2]
        connection.close()

    def test_model_def_serializes(self, runtime, numbers_model):
        model_def = runtime.load_model('import "numbers.docmodel"\nrun: SELECT 1 AS one').model_def

        restored = ModelDef.model_validate_json(model_def.model_dump_json())

        assert restored == model_def
        assert set(restored.contents['evens'].queries) == {'top'}
