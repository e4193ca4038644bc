"""한 페이지 분량의 결과 행을 모으고 열 너비를 계산한다."""

from collections import namedtuple

PAGE_SIZE = 50000  # 너비 계산용 메모리 상한. 텍스트 출력은 페이지마다 헤더를 다시 찍는다.
NULL_MARKER = "<NULL>"

TYPE_INTEGER = "integer"
TYPE_FRACTIONAL = "fractional"
TYPE_OTHER = "other"

ColumnDescriptor = namedtuple("ColumnDescriptor", ["name", "type_tag"])


def is_numeric_type(type_tag):
    return type_tag in (TYPE_INTEGER, TYPE_FRACTIONAL)


class ResultMatrix:
    def __init__(self, columns, capacity=PAGE_SIZE):
        self.columns = list(columns)
        self.capacity = capacity
        self.rows = []

    @property
    def type_tags(self):
        return [column.type_tag for column in self.columns]

    def is_full(self):
        return len(self.rows) >= self.capacity

    def append(self, row):
        """행을 추가한다. 페이지가 가득 차면 OverflowError (호출자가 비우고 새 페이지를 시작)."""
        if self.is_full():
            raise OverflowError(f"페이지 최대 행 수({self.capacity}) 초과")
        if len(row) != len(self.columns):
            raise ValueError(
                f"열 개수 불일치: 열 {len(self.columns)}개, 값 {len(row)}개"
            )
        self.rows.append(list(row))

    def widths(self):
        """열별 너비 = 헤더와 이 페이지 값들 중 가장 긴 길이. 페이지 간 누적하지 않는다."""
        widths = [len(column.name) for column in self.columns]
        for row in self.rows:
            for i, value in enumerate(row):
                if len(value) > widths[i]:
                    widths[i] = len(value)
        return widths

    def __len__(self):
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)
