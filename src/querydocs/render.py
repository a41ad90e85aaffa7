"""Rendering of query results into the documentation result widget.

Each result is shown three ways: an HTML table, the rows as JSON and the
SQL that produced them. The widget shows ``options.show_as`` first and lets
the reader switch between the three.
"""

import json
import logging
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

import pyarrow as pa
from jinja2 import Environment, select_autoescape
from markupsafe import Markup, escape
from pygments import highlight as pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from querydocs.engine.runtime import Result
from querydocs.exceptions import RenderError
from querydocs.options import RunOptions

logger = logging.getLogger(__name__)

RESULT_KINDS = ('html', 'json', 'sql')

env = Environment(autoescape=select_autoescape(default_for_string=True), trim_blocks=True, lstrip_blocks=True)

RESULT_TEMPLATE = env.from_string(
    """<div class="result-outer {{ size }}">
  <div class="result-controls-bar">
    <span class="result-label">QUERY RESULTS</span>
    <div class="result-controls">
{% for kind in kinds %}
      <button class="result-control" {{ 'selected' if kind == show_as else '' }} data-result-kind="{{ kind }}">{{ kind | upper }}</button>
{% endfor %}
    </div>
  </div>
{% for kind in kinds %}
  <div class="result-middle" data-result-kind="{{ kind }}" {{ 'selected' if kind == show_as else '' }}>
    <div class="result-inner">
{% if kind == 'html' %}
      {{ panels[kind] }}
{% else %}
      <pre>{{ panels[kind] }}</pre>
{% endif %}
    </div>
  </div>
{% endfor %}
</div>"""
)

TABLE_TEMPLATE = env.from_string(
    """<table class="result-table">
<thead><tr>{% for name in columns %}<th>{{ name }}</th>{% endfor %}</tr></thead>
<tbody>
{% for row in rows %}
<tr>{% for cell in row %}<td>{{ cell }}</td>{% endfor %}</tr>
{% endfor %}
</tbody>
</table>"""
)


def highlight(code: str, language: str) -> str:
    """Return ``code`` as highlighted HTML spans, without a wrapping element."""
    try:
        lexer = get_lexer_by_name(language)
    except ClassNotFound as e:
        raise RenderError(f'No highlighter for language {language!r}') from e
    return pygments_highlight(code, lexer, HtmlFormatter(nowrap=True))


class HTMLView:
    """Renders result rows as an HTML table, honouring per-field data styles."""

    def render(self, result: Result, data_styles: Optional[Mapping[str, Any]] = None) -> Markup:
        return self.render_rows(result.data.to_pylist(), result.schema.names, data_styles or {})

    def render_rows(self, rows, columns, data_styles: Mapping[str, Any]) -> Markup:
        cells = [[self.render_value(row.get(name), name, data_styles) for name in columns] for row in rows]
        return Markup(TABLE_TEMPLATE.render(columns=columns, rows=cells))

    def render_value(self, value: Any, name: str, data_styles: Mapping[str, Any]) -> Markup:
        if isinstance(value, list) and value and all(isinstance(item, dict) for item in value):
            return self.render_rows(value, list(value[0].keys()), data_styles)
        if isinstance(value, dict):
            return self.render_rows([value], list(value.keys()), data_styles)
        if value is None:
            return Markup('<span class="null">∅</span>')

        style = data_styles.get(name) or {}
        renderer = style.get('renderer', 'text')
        if renderer == 'number':
            value_format = style.get('value_format')
            return escape(format(value, value_format) if value_format else str(value))
        if renderer == 'percent':
            return escape(f'{float(value):.2%}')
        if renderer == 'currency':
            return escape(f'${float(value):,.2f}')
        if renderer == 'boolean':
            return escape('true' if value else 'false')
        if renderer == 'link':
            return Markup('<a href="{0}">{0}</a>').format(value)
        if renderer == 'image':
            return Markup('<img src="{0}" alt="{1}">').format(value, name)
        if renderer != 'text':
            logger.warning(f'Unknown renderer {renderer!r} for field {name!r}, rendering as text')
        return escape(str(value))


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return str(value)


def result_json(data: pa.Table) -> str:
    return json.dumps(data.to_pylist(), indent=2, default=_json_default)


def render_result(result: Result, data_styles: Dict[str, Any], options: RunOptions) -> str:
    """Render the three views of ``result`` into one result widget."""
    show_as = options.show_as or 'html'
    panels = {
        'html': HTMLView().render(result, data_styles),
        'json': Markup(highlight(result_json(result.data), 'json')),
        'sql': Markup(highlight(result.sql, 'sql')),
    }
    return RESULT_TEMPLATE.render(size=options.size or 'small', kinds=RESULT_KINDS, show_as=show_as, panels=panels)
