import io

import pytest

from querytool.result_matrix import ColumnDescriptor


class FakeResultSet:
    """테스트용 결과 집합 핸들. 행은 이미 문자열로 변환된 값이다."""

    def __init__(self, columns, rows, warnings=None):
        self._columns = [ColumnDescriptor(name, tag) for name, tag in columns]
        self._rows = list(rows)
        self._warnings = list(warnings or [])

    def columns(self):
        return list(self._columns)

    def next_row(self):
        if not self._rows:
            return None
        return list(self._rows.pop(0))

    def drain_warnings(self):
        drained, self._warnings = self._warnings, []
        return drained


@pytest.fixture
def make_result_set():
    return FakeResultSet


@pytest.fixture
def buf():
    return io.StringIO()
