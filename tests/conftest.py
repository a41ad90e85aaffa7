# tests/conftest.py
"""
Shared pytest configuration and fixtures for the querydocs test suite.
"""

import logging
from pathlib import Path

import pytest

from querydocs.config import Settings, configure
from querydocs.connections import CONNECTIONS
from querydocs.dependencies import DEPENDENCIES

logging.basicConfig(level=logging.INFO)


@pytest.fixture(autouse=True)
def reset_shared_state():
    """Give every test an empty dependency map, no open connections and default settings"""
    DEPENDENCIES.clear()
    yield
    CONNECTIONS.close_all()
    DEPENDENCIES.clear()
    configure(None)


@pytest.fixture
def docs_project(tmp_path) -> Settings:
    """A project with empty models/ and src/guide/ directories, set as the process settings"""
    (tmp_path / 'models').mkdir()
    (tmp_path / 'src' / 'guide').mkdir(parents=True)
    settings = Settings(models_root=tmp_path / 'models', docs_root=tmp_path / 'src')
    configure(settings)
    return settings


@pytest.fixture
def write_file(tmp_path):
    """Write a file relative to the project root, creating parent directories"""

    def write(relative_path: str, text: str) -> Path:
        path = tmp_path / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    return write


@pytest.fixture
def numbers_model(write_file, numbers_styles):
    """models/numbers.docmodel declaring a 20-row source and two explores over it"""
    return write_file(
        'models/numbers.docmodel',
        """--! styles numbers.styles.json
source: numbers is SELECT * FROM range(20) t(n)
explore: evens is SELECT * FROM {{ ref('numbers') }} WHERE n % 2 = 0
  query: top is SELECT n FROM {{ this }} ORDER BY n DESC
explore: odds is SELECT * FROM {{ ref('numbers') }} WHERE n % 2 = 1
  query: top is SELECT n FROM {{ this }} ORDER BY n DESC
query: top is SELECT n FROM {{ ref('numbers') }} WHERE n >= 10
sql: raw_count is SELECT count(*) AS total FROM range(20) t(n)
""",
    )


@pytest.fixture
def numbers_styles(write_file):
    return write_file('models/numbers.styles.json', '{"n": {"renderer": "currency"}}')
