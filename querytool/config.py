"""출력 설정. CLI에서 한 번 만들어 렌더러와 세션에 명시적으로 넘긴다."""

import re
from dataclasses import dataclass

from querytool.logger import get_logger

logger = get_logger("config")

FORMAT_TEXT = "text"
FORMAT_CSV = "csv"
FORMAT_HTML = "html"
FORMAT_XLS = "xls"
OUTPUT_FORMATS = (FORMAT_TEXT, FORMAT_CSV, FORMAT_HTML, FORMAT_XLS)

# 지시자 없이 주어진 제목에 붙이는 기본 스타일: 굵게+밑줄+가운데, 3단계 제목, 6칸 병합
DEFAULT_TITLE_DIRECTIVE = "{BUC3>6}"

# 탭 지정 형식: "[이름|제목][이름2]..."
_TAB_SPEC_RE = re.compile(r"^(\[[^\[]*\])*$")

# 시트 이름에 쓸 수 없는 문자
_INVALID_SHEET_CHARS_RE = re.compile(r"[\\/*?:\[\]]")


@dataclass(frozen=True)
class OutputConfig:
    output_format: str = FORMAT_TEXT
    headings: bool = True
    title: str = None
    css_file: str = None
    append: bool = False
    increment_tab: bool = False
    tabs: tuple = ()
    sheet_name: str = None
    results_only: bool = False
    output_file: str = None

    def __post_init__(self):
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"지원하지 않는 출력 형식: {self.output_format}")

    @property
    def tab_names(self):
        return [name for name, _ in self.tabs]

    @property
    def tab_titles(self):
        return [title for _, title in self.tabs]


def normalize_title(title):
    """'{'로 시작하지 않는 제목에 기본 스타일 지시자를 붙인다."""
    if title is None:
        return None
    if title.startswith("{"):
        return title
    return DEFAULT_TITLE_DIRECTIVE + title


def parse_tab_spec(spec):
    """탭 지정 문자열을 (이름, 제목) 튜플로 변환한다.

    예: "[Q1|{B}1분기][Q2]" → (("Q1", "{B}1분기"), ("Q2", "{BUC3>6}Q2"))
    제목이 없으면 탭 이름을 기본 스타일로 제목 삼는다.
    형식이 잘못되었거나 시트 이름에 \\ / * ? : 가 있으면 경고만 남기고
    빈 튜플을 반환한다 (탭 기능 비활성화).
    """
    if not spec:
        return ()
    if not _TAB_SPEC_RE.match(spec):
        logger.warning("탭 지정 형식 오류, 탭 기능을 끕니다: %s", spec)
        return ()

    tabs = []
    for token in re.split(r"[\[\]]+", spec):
        if not token:
            continue
        parts = [p for p in token.split("|") if p]
        if not parts:
            continue
        name = parts[0]
        if _INVALID_SHEET_CHARS_RE.search(name):
            logger.warning("시트 이름에 쓸 수 없는 문자가 있어 탭 기능을 끕니다: %s", name)
            return ()
        title = parts[1] if len(parts) > 1 else name
        tabs.append((name, normalize_title(title)))

    for name, title in tabs:
        logger.debug("탭: %s (제목 %s)", name, title)
    return tuple(tabs)
