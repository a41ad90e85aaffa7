"""Statement parser for model documents.

A document is a sequence of statements, each starting at the beginning of a
line::

    import "flights.docmodel"
    source: flights is SELECT * FROM read_csv_auto('flights.csv')
    explore: carriers is flights
      query: by_carrier is SELECT carrier, count(*) AS n FROM {{ this }} GROUP BY 1
    query: recent is SELECT * FROM {{ ref('flights') }}
    sql: raw_count is SELECT count(*) AS n FROM read_csv_auto('flights.csv')
    run: SELECT * FROM {{ ref('flights') }}

A statement body continues on the following lines until the next statement.
``--`` lines are comments, ``##`` lines annotate the model and ``#`` lines
annotate the statement that follows them. Indented ``query:`` statements
after an ``explore:`` belong to that explore.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from querydocs.exceptions import CompilationError

IMPORT_PATTERN = re.compile(r'^import\s+"(?P<url>[^"]+)"\s*$')
STATEMENT_PATTERN = re.compile(r'^(?P<indent>[ \t]*)(?P<kind>source|explore|query|sql|run):(?P<rest>.*)$')
NAMED_PATTERN = re.compile(r'^(?P<name>[A-Za-z_]\w*)\s+is\s+(?P<body>.+)$', re.DOTALL)

NAMED_KINDS = ('source', 'explore', 'query', 'sql')


@dataclass
class Statement:
    kind: str
    body: str
    line: int
    tags: List[str] = field(default_factory=list)
    name: Optional[str] = None
    children: List['Statement'] = field(default_factory=list)


@dataclass
class ParsedDocument:
    statements: List[Statement]
    annotations: List[str]


def parse_document(text: str, url: Optional[str] = None) -> ParsedDocument:
    """Split a model document into statements.

    Args:
        text: Document contents
        url: Document URL, used in error messages

    Returns:
        ParsedDocument with top-level statements and model annotations

    Raises:
        CompilationError: If a line is not part of any statement or a
            declaration has no name
    """
    where = url or '<snippet>'
    statements: List[Statement] = []
    annotations: List[str] = []
    pending: List[str] = []
    current: Optional[Statement] = None
    explore: Optional[Statement] = None

    for number, line in enumerate(text.split('\n'), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith('--'):
            continue
        if stripped.startswith('##'):
            annotations.append(stripped)
            continue
        if stripped.startswith('#'):
            pending.append(stripped)
            continue

        import_match = IMPORT_PATTERN.match(line)
        if import_match:
            statements.append(Statement('import', import_match['url'], number, pending))
            pending, current, explore = [], None, None
            continue

        match = STATEMENT_PATTERN.match(line)
        if match:
            statement = Statement(match['kind'], match['rest'], number, pending)
            pending = []
            if match['indent'] and statement.kind == 'query' and explore is not None:
                explore.children.append(statement)
            else:
                statements.append(statement)
                explore = statement if statement.kind == 'explore' else None
            current = statement
            continue

        if current is None:
            raise CompilationError(f'{where}:{number}: expected a statement, found {stripped!r}')
        current.body += '\n' + line

    for statement in statements:
        _finish(statement, where)
    return ParsedDocument(statements=statements, annotations=annotations)


def _finish(statement: Statement, where: str) -> None:
    """Split ``<name> is <body>`` and tidy the body."""
    body = statement.body.strip()
    if statement.kind in NAMED_KINDS:
        match = NAMED_PATTERN.match(body)
        if not match:
            raise CompilationError(
                f"{where}:{statement.line}: expected '{statement.kind}: <name> is ...', found {body[:40]!r}"
            )
        statement.name = match['name']
        body = match['body'].strip()
    if not body:
        raise CompilationError(f'{where}:{statement.line}: empty {statement.kind} statement')
    statement.body = body
    for child in statement.children:
        _finish(child, where)
