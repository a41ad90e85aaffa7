"""CLI for querydocs."""

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from querydocs.config import configure, load_settings
from querydocs.dependencies import DEPENDENCIES
from querydocs.engine.models import ModelDef
from querydocs.exceptions import QueryDocsError
from querydocs.notebook import run_notebook_code
from querydocs.options import RunOptions, options_from_snippet
from querydocs.runner import run_code

app = typer.Typer(name='querydocs', help='Run the queries embedded in documentation and render their results')
console = Console()


def _print_dependencies() -> None:
    dependencies = DEPENDENCIES.items()
    if not dependencies:
        console.print('[yellow]No model dependencies recorded[/yellow]')
        return

    table = Table(title='Model Dependencies')
    table.add_column('Model', style='cyan')
    table.add_column('Documents', style='yellow')
    for model_key, documents in sorted(dependencies.items()):
        table.add_row(model_key, ', '.join(documents))
    console.print(table)


def _write_output(rendered: str, output: Optional[Path]) -> None:
    if output is None:
        print(rendered)
    else:
        output.write_text(rendered)
        console.print(f'[green]✓[/green] Wrote {output}')


@app.command()
def run(
    snippet: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help='File holding the snippet to run'
    ),
    document: str = typer.Option(..., '--document', '-d', help='Document path relative to the docs root'),
    source: Optional[str] = typer.Option(None, '--source', help='Model to import ahead of the snippet'),
    query_name: Optional[str] = typer.Option(None, '--query-name', help='Named query to run'),
    explore_name: Optional[str] = typer.Option(None, '--explore-name', help='Explore holding the named query'),
    sql_block_name: Optional[str] = typer.Option(None, '--sql-block-name', help='Named SQL block to run'),
    page_size: Optional[int] = typer.Option(None, '--page-size', help='Rows to fetch'),
    show_as: Optional[str] = typer.Option(None, '--show-as', help='Initial view: html, json or sql'),
    output: Optional[Path] = typer.Option(None, '--output', '-o', help='Write the rendered HTML here'),
    show_deps: bool = typer.Option(False, '--show-deps', help='Print the model dependencies afterwards'),
    project_dir: Optional[Path] = typer.Option(None, '--project-dir', help='Project directory (default: current directory)'),
):
    """Run one snippet and print its rendered result."""
    try:
        configure(load_settings(project_dir))
        options, code = options_from_snippet(snippet.read_text())
        overrides = {
            'source': source,
            'query_name': query_name,
            'explore_name': explore_name,
            'sql_block_name': sql_block_name,
            'page_size': page_size,
            'show_as': show_as,
        }
        merged = {**options.model_dump(), **{key: value for key, value in overrides.items() if value is not None}}
        options = RunOptions.from_dict(merged)

        rendered = asyncio.run(run_code(code, document, options))
        _write_output(rendered, output)
        if show_deps:
            _print_dependencies()

    except QueryDocsError as e:
        console.print(f'[bold red]Error:[/bold red] {e}')
        sys.exit(1)


@app.command()
def notebook(
    blocks: List[Path] = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help='Files holding the notebook blocks, in order'
    ),
    document: str = typer.Option(..., '--document', '-d', help='Document path relative to the docs root'),
    output: Optional[Path] = typer.Option(None, '--output', '-o', help='Write the rendered HTML here'),
    show_deps: bool = typer.Option(False, '--show-deps', help='Print the model dependencies afterwards'),
    project_dir: Optional[Path] = typer.Option(None, '--project-dir', help='Project directory (default: current directory)'),
):
    """Run notebook blocks in order, each extending the model of the ones before."""

    async def run_blocks() -> List[str]:
        model_def = ModelDef.empty()
        fragments = []
        for block in blocks:
            code = block.read_text()
            result = await run_notebook_code(code, code, document, RunOptions(), model_def)
            model_def = result.new_model
            if result.is_hidden:
                console.print(f'[dim]{block.name} is hidden[/dim]')
            elif result.rendered:
                fragments.append(result.rendered)
        return fragments

    try:
        configure(load_settings(project_dir))
        fragments = asyncio.run(run_blocks())
        _write_output('\n'.join(fragments), output)
        if show_deps:
            _print_dependencies()

    except QueryDocsError as e:
        console.print(f'[bold red]Error:[/bold red] {e}')
        sys.exit(1)


def main():
    app()


if __name__ == '__main__':
    main()
