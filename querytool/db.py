"""DB-API 커서를 결과 집합 핸들로 감싸는 얇은 어댑터.

렌더러는 문자열 값과 대략적인 숫자/비숫자 유형만 받는다.
"""

from decimal import Decimal

from querytool.logger import get_logger
from querytool.result_matrix import (
    NULL_MARKER,
    TYPE_FRACTIONAL,
    TYPE_INTEGER,
    TYPE_OTHER,
    ColumnDescriptor,
)

logger = get_logger("db")

FETCH_SIZE = 500


def classify_value(value):
    """파이썬 값의 유형으로 열 유형 태그를 정한다. bool은 숫자로 보지 않는다."""
    if isinstance(value, bool):
        return TYPE_OTHER
    if isinstance(value, int):
        return TYPE_INTEGER
    if isinstance(value, (float, Decimal)):
        return TYPE_FRACTIONAL
    return TYPE_OTHER


def stringify(value):
    if value is None:
        return NULL_MARKER
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return str(value)


class CursorResultSet:
    """실행된 커서의 현재 결과 집합.

    열 유형은 첫 묶음(FETCH_SIZE행)에서 처음 나오는 NULL 아닌 값으로 판별한다.
    """

    def __init__(self, cursor):
        self.cursor = cursor
        self._names = [str(d[0]) for d in cursor.description]
        self._buffer = list(cursor.fetchmany(FETCH_SIZE))
        self._pos = 0
        self._done = not self._buffer
        self._columns = [
            ColumnDescriptor(name, self._classify_column(i))
            for i, name in enumerate(self._names)
        ]

    def _classify_column(self, index):
        for row in self._buffer:
            if row[index] is not None:
                return classify_value(row[index])
        return TYPE_OTHER

    def columns(self):
        return list(self._columns)

    def next_row(self):
        """다음 행을 문자열 리스트로 돌려준다. 끝이면 None."""
        if self._pos >= len(self._buffer):
            if self._done:
                return None
            self._buffer = list(self.cursor.fetchmany(FETCH_SIZE))
            self._pos = 0
            if not self._buffer:
                self._done = True
                return None
        row = self._buffer[self._pos]
        self._pos += 1
        return [stringify(value) for value in row]

    def drain_warnings(self):
        """드라이버 경고(DB-API messages 확장)를 비우고 메시지 목록을 돌려준다."""
        messages = getattr(self.cursor, "messages", None)
        if not messages:
            return []
        drained = [str(value) for _, value in messages]
        del messages[:]
        return drained


def iter_results(cursor):
    """실행된 커서에서 결과 집합 핸들 또는 갱신 건수(int)를 차례로 내놓는다."""
    while True:
        if cursor.description is not None:
            yield CursorResultSet(cursor)
        else:
            yield max(cursor.rowcount, 0)
        nextset = getattr(cursor, "nextset", None)
        if nextset is None or not nextset():
            break


def execute_statement(cursor, sql):
    """문장을 즉시 실행하고 결과 반복자를 돌려준다. 실행 오류는 여기서 바로 난다."""
    logger.debug("실행: %s", sql)
    cursor.execute(sql)
    return iter_results(cursor)
