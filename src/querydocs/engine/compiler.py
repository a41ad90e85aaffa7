"""SQL compilation for model declarations."""

import re
from typing import Dict, Mapping, Optional

from jinja2 import Environment, StrictUndefined, TemplateError

from querydocs.engine.models import Definition
from querydocs.exceptions import CompilationError

REF_PATTERN = re.compile(r'__REF__(\w+)__')
WITH_PATTERN = re.compile(r'^\s*WITH\s+(RECURSIVE\s+)?', re.IGNORECASE)


class Compiler:
    """Renders SQL templates and inlines referenced declarations as CTEs."""

    def __init__(self):
        self.env = Environment(autoescape=False, undefined=StrictUndefined)
        self.env.globals['ref'] = self._ref_function

    def _ref_function(self, name: str) -> str:
        """Jinja function for ref() calls, resolved after rendering."""
        return f'__REF__{name}__'

    def render(self, sql: str, label: str, explore: Optional[str] = None) -> str:
        """Render a template, leaving ref() placeholders in place.

        Args:
            sql: SQL template
            label: Name used in error messages
            explore: Explore the template is nested in, bound to ``this``

        Raises:
            CompilationError: If the template does not render
        """
        context = {'this': self._ref_function(explore)} if explore else {}
        try:
            return self.env.from_string(sql).render(**context)
        except TemplateError as e:
            raise CompilationError(f'Failed to compile {label}: {e}') from e

    def compile(
        self,
        sql: str,
        label: str,
        scope: Mapping[str, Definition],
        explore: Optional[str] = None,
    ) -> str:
        """Compile a template into a self-contained SQL statement.

        Declarations in ``scope`` hold compiled SQL already, so each one
        reached through ref() becomes a single CTE.

        Args:
            sql: SQL template
            label: Name used in error messages
            scope: Declarations visible to the template
            explore: Explore the template is nested in, bound to ``this``

        Returns:
            SQL with a WITH clause for the referenced declarations

        Raises:
            CompilationError: On a template error or an unknown reference
        """
        rendered = self.render(sql, label, explore)

        ctes: Dict[str, str] = {}
        for name in REF_PATTERN.findall(rendered):
            if name in ctes:
                continue
            definition = scope.get(name)
            if definition is None:
                raise CompilationError(f'Failed to compile {label}: unknown reference "{name}"')
            ctes[name] = definition.sql

        final_sql = self._replace_refs(rendered).strip()
        if not ctes:
            return final_sql

        cte_section = ',\n'.join(f'{name} AS (\n{cte_sql}\n)' for name, cte_sql in ctes.items())
        match = WITH_PATTERN.match(final_sql)
        if match:
            # Merge into the statement's own WITH clause
            keyword = 'WITH RECURSIVE ' if match.group(1) else 'WITH '
            return f'{keyword}{cte_section},\n{final_sql[match.end():]}'
        return f'WITH {cte_section}\n{final_sql}'

    def _replace_refs(self, sql: str) -> str:
        return REF_PATTERN.sub(lambda match: match.group(1), sql)
