"""querydocs - run the data queries embedded in documentation and render their results."""

from querydocs.config import Settings, configure, get_settings, load_settings
from querydocs.dependencies import DEPENDENCIES, DependencyTracker, dependencies_of
from querydocs.engine.models import ModelDef
from querydocs.notebook import NotebookResult, run_notebook_code
from querydocs.options import LocatorMode, RunOptions, options_from_snippet
from querydocs.runner import run_code

__all__ = [
    'DEPENDENCIES',
    'DependencyTracker',
    'LocatorMode',
    'ModelDef',
    'NotebookResult',
    'RunOptions',
    'Settings',
    'configure',
    'dependencies_of',
    'get_settings',
    'load_settings',
    'options_from_snippet',
    'run_code',
    'run_notebook_code',
]
