"""제목, 헤더, 스타일 셀에 쓰이는 `{플래그}텍스트` 지시자 해석기.

지원 플래그 (대소문자 무시):
    b  굵게          i  기울임       u  밑줄        c  가운데 정렬
    1~4  제목 단계 (글자 크기 = 20 - 2 × 단계, 기본 5단계 = 10pt)
    >N   현재 셀부터 오른쪽으로 N칸 병합 (N은 한 자리 숫자)

예: "{BUC3>6}합계" → 굵게, 밑줄, 가운데, 3단계(14pt), 6칸 병합, 텍스트 "합계"
"""

from dataclasses import dataclass

DEFAULT_HEADING_LEVEL = 5

_FLAG_ATTRS = {"b": "bold", "i": "italic", "u": "underline", "c": "center"}


@dataclass(frozen=True)
class StyleDirective:
    text: str = ""
    bold: bool = False
    italic: bool = False
    underline: bool = False
    center: bool = False
    heading_level: int = DEFAULT_HEADING_LEVEL
    merge_span: int = None

    @property
    def key(self):
        """글꼴 캐시 키. 가운데 정렬과 병합은 셀마다 적용하므로 키에 넣지 않는다."""
        return (
            (str(self.heading_level) if self.heading_level > 0 else "")
            + ("B" if self.bold else "")
            + ("I" if self.italic else "")
            + ("U" if self.underline else "")
        )

    @property
    def font_size(self):
        return 20 - 2 * self.heading_level


def tokenize_flags(value):
    """'{' 다음부터 '}' 또는 문자열 끝까지의 플래그 문자를 돌려준다.

    Returns:
        tuple: (플래그 문자열, 닫는 괄호 뒤 텍스트). 닫는 괄호가 없으면 텍스트는 "".
    """
    end = value.find("}", 1)
    if end == -1:
        return value[1:], ""
    return value[1:end], value[end + 1:]


def parse_directive(value):
    """문자열을 StyleDirective로 해석한다. '{'로 시작하지 않으면 기본 스타일."""
    if not value or not value.startswith("{"):
        return StyleDirective(text=value or "")

    flags, text = tokenize_flags(value)
    attrs = {}
    heading_level = DEFAULT_HEADING_LEVEL
    merge_span = None

    for ch in flags:
        lowered = ch.lower()
        if lowered in _FLAG_ATTRS:
            attrs[_FLAG_ATTRS[lowered]] = True
        elif ch == ">":
            merge_span = 0
        elif merge_span is not None:
            if ch.isdigit():
                merge_span = int(ch)
        elif "1" <= ch <= "4":
            heading_level = int(ch)

    return StyleDirective(
        text=text,
        heading_level=heading_level,
        merge_span=merge_span,
        **attrs,
    )


def directive_text(value):
    """지시자를 떼어낸 텍스트만 돌려준다. HTML/CSV 제목 출력용."""
    if value is None:
        return None
    return parse_directive(value).text
