"""Tests for DependencyTracker"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from querydocs.dependencies import DEPENDENCIES, DependencyTracker, add_dependency, dependencies_of


@pytest.mark.unit
class TestDependencyTracker:
    """Test DependencyTracker class"""

    def test_add_dependency_is_idempotent(self):
        tracker = DependencyTracker()
        tracker.add_dependency('flights.docmodel', 'guide/intro.md')
        tracker.add_dependency('flights.docmodel', 'guide/intro.md')

        assert tracker.dependencies_of('flights.docmodel') == ['guide/intro.md']

    def test_multiple_documents_per_model(self):
        tracker = DependencyTracker()
        tracker.add_dependency('flights.docmodel', 'guide/intro.md')
        tracker.add_dependency('flights.docmodel', 'guide/joins.md')

        assert sorted(tracker.dependencies_of('flights.docmodel')) == ['guide/intro.md', 'guide/joins.md']

    def test_unknown_model_has_no_dependencies(self):
        tracker = DependencyTracker()
        assert tracker.dependencies_of('missing.docmodel') == []
        assert 'missing.docmodel' not in tracker

    def test_dependencies_of_returns_a_copy(self):
        tracker = DependencyTracker()
        tracker.add_dependency('flights.docmodel', 'guide/intro.md')

        tracker.dependencies_of('flights.docmodel').append('other.md')

        assert tracker.dependencies_of('flights.docmodel') == ['guide/intro.md']

    def test_documents_for_changed_models(self):
        tracker = DependencyTracker()
        tracker.add_dependency('flights.docmodel', 'guide/intro.md')
        tracker.add_dependency('airports.docmodel', 'guide/intro.md')
        tracker.add_dependency('airports.docmodel', 'guide/maps.md')
        tracker.add_dependency('unrelated.docmodel', 'guide/other.md')

        documents = tracker.documents_for(['flights.docmodel', 'airports.docmodel'])

        assert sorted(documents) == ['guide/intro.md', 'guide/maps.md']

    def test_items_and_clear(self):
        tracker = DependencyTracker()
        tracker.add_dependency('a.docmodel', 'one.md')
        tracker.add_dependency('b.docmodel', 'two.md')

        assert tracker.items() == {'a.docmodel': ['one.md'], 'b.docmodel': ['two.md']}
        assert len(tracker) == 2

        tracker.clear()
        assert tracker.items() == {}

    def test_concurrent_inserts_are_not_lost(self):
        tracker = DependencyTracker()
        documents = [f'guide/page_{i}.md' for i in range(200)]

        def record(document_path):
            tracker.add_dependency('shared.docmodel', document_path)
            tracker.add_dependency('shared.docmodel', document_path)

        with ThreadPoolExecutor(max_workers=16) as executor:
            list(executor.map(record, documents))

        recorded = tracker.dependencies_of('shared.docmodel')
        assert len(recorded) == len(documents)
        assert set(recorded) == set(documents)

    def test_module_functions_use_process_tracker(self):
        add_dependency('flights.docmodel', 'guide/intro.md')
        assert dependencies_of('flights.docmodel') == ['guide/intro.md']
        assert DEPENDENCIES.dependencies_of('flights.docmodel') == ['guide/intro.md']
