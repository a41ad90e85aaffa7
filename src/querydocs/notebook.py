"""Notebook-style execution, where each code block extends the model of the blocks before it."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from querydocs.config import Settings, get_settings
from querydocs.connections import CONNECTIONS
from querydocs.engine.models import ModelDef
from querydocs.engine.runtime import Runtime
from querydocs.engine.tags import parse_tags, select_tags
from querydocs.exceptions import ConfigError, QueryDocsError
from querydocs.options import RunOptions
from querydocs.render import render_result
from querydocs.resolver import DocsURLReader
from querydocs.styles import merge_styles
from querydocs.utils import query_summary, time_string

logger = logging.getLogger(__name__)

MODEL_TAG_PREFIX = '##(docs) '
QUERY_TAG_PREFIX = '#(docs) '


@dataclass
class NotebookResult:
    """Output of one notebook block."""

    rendered: str  # Empty when the block has no query
    new_model: ModelDef
    is_hidden: bool


def _apply_query_tags(tags, options: RunOptions, document_path: str) -> None:
    """Set page size, size and format from a query's ``#(docs)`` tags.

    Options are overwritten even when the tag is absent.
    """
    limit = tags.get('limit')
    if isinstance(limit, str):
        try:
            options.page_size = int(limit)
        except ValueError as e:
            raise ConfigError(f'Invalid limit {limit!r} in {document_path}: expected an integer') from e
    else:
        options.page_size = None

    size = tags.get('size')
    options.size = size if isinstance(size, str) else None
    options.show_as = next((kind for kind in ('html', 'sql', 'json') if kind in tags), 'html')


async def run_notebook_code(
    code: str,
    show_code: str,
    document_path: str,
    options: RunOptions,
    model_def: ModelDef,
    *,
    settings: Optional[Settings] = None,
) -> NotebookResult:
    """Extend ``model_def`` with a code block and run the block's query, if it has one.

    Args:
        code: Block text compiled into the model
        show_code: Block text as shown to readers, used for logging
        document_path: Documentation file path, relative to the docs root
        options: Run options, updated in place from the block's tags
        model_def: Model built from the previous blocks of the document

    Returns:
        NotebookResult with the rendered widget (empty without a query), the
        extended model and whether the block asks to be hidden
    """
    settings = settings or get_settings()
    block_url = settings.document_url(document_path)
    url_reader = DocsURLReader(document_path, {block_url: code}, settings=settings)
    connection = CONNECTIONS.get_connection(document_path, settings)
    runtime = Runtime(url_reader, connection, import_base_url=settings.models_url)

    summary = query_summary(show_code)
    logger.info(f'  >> Running (notebook) query {summary}')
    start = time.perf_counter()
    loop = asyncio.get_running_loop()
    try:
        model = await loop.run_in_executor(None, runtime.extend_model, model_def, block_url)
        model_tags = parse_tags(select_tags(model.tags, MODEL_TAG_PREFIX, '## '))
        options.is_hidden = 'hidden' in model_tags

        query = model.final_query()
        if query is None:
            return NotebookResult(rendered='', new_model=model.model_def, is_hidden=options.is_hidden)

        _apply_query_tags(parse_tags(select_tags(query.tags, QUERY_TAG_PREFIX, '# ')), options, document_path)
        result = await loop.run_in_executor(None, query.run, options.page_size or settings.page_size)
    except QueryDocsError as e:
        logger.error(f'  >> Failed running (notebook) query {summary} in {document_path}: {e}')
        raise
    logger.info(f'  >> Finished running query {summary} in {time_string(start, time.perf_counter())}')

    data_styles = merge_styles(options.data_styles, url_reader.data_styles)
    rendered = render_result(result, data_styles, options)
    return NotebookResult(rendered=rendered, new_model=model.model_def, is_hidden=options.is_hidden)
