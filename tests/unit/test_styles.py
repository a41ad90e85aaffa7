"""Tests for data styles directives"""

import pytest

from querydocs.exceptions import ResourceNotFoundError, StylesError
from querydocs.resolver import FileStorage
from querydocs.styles import data_styles_for_file, merge_styles


@pytest.mark.unit
class TestMergeStyles:
    """Test merge_styles function"""

    def test_overlay_wins_on_collision(self):
        base = {'x': {'renderer': 'number'}, 'y': {'renderer': 'link'}}
        overlay = {'x': {'renderer': 'percent'}}

        merged = merge_styles(base, overlay)

        assert merged == {'x': {'renderer': 'percent'}, 'y': {'renderer': 'link'}}

    def test_merge_is_shallow_and_pure(self):
        base = {'x': {'renderer': 'number', 'value_format': ',.0f'}}
        overlay = {'x': {'renderer': 'percent'}}

        merged = merge_styles(base, overlay)

        assert merged['x'] == {'renderer': 'percent'}
        assert base == {'x': {'renderer': 'number', 'value_format': ',.0f'}}

    def test_none_inputs(self):
        assert merge_styles(None, None) == {}
        assert merge_styles({'x': {}}, None) == {'x': {}}


@pytest.mark.unit
class TestDataStylesForFile:
    """Test data_styles_for_file function"""

    def test_later_directive_wins(self, tmp_path):
        (tmp_path / 'a.json').write_text('{"x": {"renderer": "number"}, "y": {"renderer": "link"}}')
        (tmp_path / 'b.json').write_text('{"x": {"renderer": "currency"}}')
        text = '--! styles a.json\n--! styles b.json\nsource: s is SELECT 1 AS x'

        styles = data_styles_for_file(f'file://{tmp_path}/model.docmodel', text, FileStorage())

        assert styles == {'x': {'renderer': 'currency'}, 'y': {'renderer': 'link'}}

    def test_styles_resolve_relative_to_declaring_file(self, tmp_path):
        (tmp_path / 'styles').mkdir()
        (tmp_path / 'styles' / 'shared.json').write_text('{"x": {"renderer": "percent"}}')
        text = '--! styles styles/shared.json  \n'

        styles = data_styles_for_file(f'file://{tmp_path}/model.docmodel', text, FileStorage())

        assert styles == {'x': {'renderer': 'percent'}}

    def test_directive_must_start_the_line(self, tmp_path):
        text = '  --! styles missing.json\nsource: s is SELECT 1'
        assert data_styles_for_file(f'file://{tmp_path}/model.docmodel', text, FileStorage()) == {}

    def test_invalid_json(self, tmp_path):
        (tmp_path / 'bad.json').write_text('{"x": ')
        with pytest.raises(StylesError, match='Invalid JSON'):
            data_styles_for_file(f'file://{tmp_path}/m.docmodel', '--! styles bad.json', FileStorage())

    def test_non_object_json(self, tmp_path):
        (tmp_path / 'list.json').write_text('[1, 2]')
        with pytest.raises(StylesError, match='JSON object'):
            data_styles_for_file(f'file://{tmp_path}/m.docmodel', '--! styles list.json', FileStorage())

    def test_missing_styles_file(self, tmp_path):
        with pytest.raises(ResourceNotFoundError):
            data_styles_for_file(f'file://{tmp_path}/m.docmodel', '--! styles nope.json', FileStorage())
