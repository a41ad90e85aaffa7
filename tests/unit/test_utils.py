"""Tests for runner helpers"""

import pytest

from querydocs.utils import query_summary, time_string


@pytest.mark.unit
class TestTimeString:
    """Test time_string function"""

    def test_milliseconds(self):
        assert time_string(10.0, 10.25) == '250ms'

    def test_seconds(self):
        assert time_string(0.0, 2.5) == '2.50s'

    def test_minutes(self):
        assert time_string(0.0, 125.0) == '2m 5s'


@pytest.mark.unit
class TestQuerySummary:
    """Test query_summary function"""

    def test_flattens_and_truncates(self):
        code = 'run: SELECT *\nFROM range(100) t(n)\nWHERE n > 10 AND n < 90 ORDER BY n DESC'

        summary = query_summary(code)

        assert '\n' not in summary
        assert summary.startswith('"run: SELECT * FROM range(100) t(n)')
        assert summary.endswith('..."')
        assert len(summary) == 50 + len('"..."')
