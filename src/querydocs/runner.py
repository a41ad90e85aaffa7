"""One-shot execution of a documentation snippet."""

import asyncio
import logging
import time
from typing import Mapping, Optional

from querydocs.config import Settings, get_settings
from querydocs.connections import CONNECTIONS
from querydocs.engine.runtime import Runnable, Runtime
from querydocs.exceptions import QueryDocsError
from querydocs.options import LocatorMode, RunOptions
from querydocs.render import render_result
from querydocs.resolver import DocsURLReader
from querydocs.styles import merge_styles
from querydocs.utils import query_summary, time_string

logger = logging.getLogger(__name__)


def locate_runnable(runtime: Runtime, code: str, options: RunOptions) -> Runnable:
    """Find the object ``options`` asks to run in the model compiled from ``code``."""
    mode = options.locator_mode
    if mode == LocatorMode.SQL_BLOCK:
        return runtime.load_model(code).sql_block(options.sql_block_name)
    if mode == LocatorMode.EXPLORE_QUERY:
        return runtime.load_model(code).explore(options.explore_name).query(options.query_name)
    if mode == LocatorMode.NAMED_QUERY:
        return runtime.load_model(code).query(options.query_name)
    return runtime.load_query(code)


async def run_code(
    code: str,
    document_path: str,
    options: RunOptions,
    inline_models: Optional[Mapping[str, str]] = None,
    *,
    settings: Optional[Settings] = None,
) -> str:
    """Run a snippet from the document at ``document_path`` and render the result as HTML.

    Args:
        code: Snippet text
        document_path: Documentation file path, relative to the docs root
        options: How to find the runnable object and how to show the result
        inline_models: Model contents not on disk yet, keyed by path relative
            to the models root
        settings: Settings to use instead of the process-wide ones

    Returns:
        Rendered result widget

    Raises:
        QueryDocsError: If a file is missing or the snippet fails to compile or run
    """
    settings = settings or get_settings()
    url_reader = DocsURLReader(
        document_path,
        {settings.resolve_source_path(path): text for path, text in (inline_models or {}).items()},
        settings=settings,
    )
    connection = CONNECTIONS.get_connection(document_path, settings)
    runtime = Runtime(url_reader, connection, import_base_url=settings.models_url)

    # A snippet with a source is treated as importing that model, so only what
    # the model exports is visible to the snippet. Compile the source model and
    # extend it instead if snippets ever need its non-exported members.
    full_code = f'import "{settings.resolve_source_path(options.source)}"\n{code}' if options.source else code

    summary = query_summary(code)
    logger.info(f'  >> Running query {summary}')
    start = time.perf_counter()
    loop = asyncio.get_running_loop()
    try:
        runnable = await loop.run_in_executor(None, locate_runnable, runtime, full_code, options)
        result = await loop.run_in_executor(None, runnable.run, options.page_size or settings.page_size)
    except QueryDocsError as e:
        logger.error(f'  >> Failed running query {summary} in {document_path}: {e}')
        raise
    logger.info(f'  >> Finished running query {summary} in {time_string(start, time.perf_counter())}')

    data_styles = merge_styles(options.data_styles, url_reader.data_styles)
    return render_result(result, data_styles, options)
