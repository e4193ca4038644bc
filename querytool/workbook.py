"""스프레드시트(워크북) 출력: 시트 결정, 추가 모드 복구, 셀 서식.

시트 레이아웃 (추가 모드 호환 규약):
    1행  스타일 지시자로 꾸민 제목 (선택)
    2행  열 이름 헤더 (선택)
    3행~ 데이터
제목이 없어도 1행은 비워 두므로 헤더/데이터는 항상 2행부터 시작한다.
"""

import io

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment
from openpyxl.utils import get_column_letter

from querytool.errors import OutputError
from querytool.logger import get_logger
from querytool.renderers import Renderer
from querytool.result_matrix import NULL_MARKER, TYPE_FRACTIONAL, is_numeric_type
from querytool.style_cache import StyleCache
from querytool.style_directive import parse_directive

logger = get_logger("workbook")

INTEGER_FORMAT = "###########0"
FRACTIONAL_FORMAT = "###,###,###,##0.00"

_RIGHT_ALIGN = Alignment(horizontal="right")
_CENTER_ALIGN = Alignment(horizontal="center")

FIRST_ROW = 1  # 제목 자리. 새 시트의 행 커서는 여기서 시작한다.


class Tab:
    """워크북의 시트 하나. row_cursor는 마지막으로 사용한 행 번호(1부터)."""

    def __init__(self, name, title=None, row_cursor=FIRST_ROW):
        self.name = name
        self.title = title
        self.row_cursor = row_cursor

    def next_row(self):
        self.row_cursor += 1
        return self.row_cursor


class WorkbookSession:
    """프로그램 실행 동안 유지되는 워크북 상태.

    문장(statement)마다 begin_statement → 렌더링 → end_statement 순으로 쓰며,
    end_statement에서 워크북 전체를 출력 파일에 덮어쓴다.
    """

    def __init__(self, config):
        if not config.output_file:
            raise OutputError("<none>", "스프레드시트 출력에는 출력 파일이 필요합니다")
        self.output_file = config.output_file
        self.tab_names = config.tab_names
        self.tab_titles = config.tab_titles
        self.pinned_sheet = config.sheet_name
        self.requested_append = config.append
        self.append = config.append
        self.increment_tab = config.increment_tab
        self.style_cache = StyleCache()
        self.workbook = None
        self.tabs = {}
        self.result_set_number = 0
        self.loaded_existing = False

    @property
    def suppress_headings(self):
        """기존 파일을 불러왔으면 제목과 헤더는 이미 있으므로 다시 쓰지 않는다."""
        return self.loaded_existing

    def begin_statement(self):
        self.append = self.requested_append
        if not self.append:
            self._start_fresh()
        elif self.workbook is None and not self._load_existing():
            # 파일이 아직 없다: 이번 문장만 새 파일처럼 쓰고, 다음 문장부터는 다시 추가 모드
            self.append = False
            self._start_fresh()

        if not self.increment_tab:
            self.result_set_number = 0

    def end_statement(self):
        """워크북을 출력 파일에 저장한다. 실패하면 OutputError."""
        if self.workbook is None:
            return
        if not self.workbook.worksheets:
            logger.info("결과 시트가 없어 워크북을 저장하지 않습니다: %s", self.output_file)
            return

        buf = io.BytesIO()
        self.workbook.save(buf)
        try:
            with open(self.output_file, "wb") as f:
                f.write(buf.getvalue())
        except OSError as exc:
            raise OutputError(self.output_file, exc) from exc
        logger.info("워크북 저장: %s (시트 %d개)", self.output_file, len(self.workbook.worksheets))

    def _start_fresh(self):
        self.workbook = Workbook()
        self.workbook.remove(self.workbook.active)
        self.tabs = {}

    def _load_existing(self):
        """기존 워크북을 불러온다. 없거나 읽을 수 없으면 False (오류 아님)."""
        try:
            with open(self.output_file, "rb") as f:
                data = f.read()
            workbook = load_workbook(io.BytesIO(data))
        except Exception as exc:
            logger.info("기존 워크북을 열 수 없어 새로 만듭니다: %s (%s)", self.output_file, exc)
            return False

        self.workbook = workbook
        self.tabs = {
            ws.title: Tab(ws.title, row_cursor=max(ws.max_row, FIRST_ROW))
            for ws in workbook.worksheets
        }
        self.loaded_existing = True
        logger.info("기존 워크북에 추가합니다: %s (시트 %s)", self.output_file, workbook.sheetnames)
        return True

    def has_sheet(self, name):
        return name in self.workbook.sheetnames

    def create_sheet(self, name=None, title=None):
        """시트를 만든다. name이 없으면 openpyxl이 자동으로 이름을 붙인다."""
        ws = self.workbook.create_sheet(title=name)
        tab = Tab(ws.title, title)
        self.tabs[ws.title] = tab
        logger.debug("시트 생성: %s", ws.title)
        return ws, tab

    def get_sheet(self, name):
        ws = self.workbook[name]
        tab = self.tabs.get(name)
        if tab is None:
            tab = Tab(name, row_cursor=max(ws.max_row, FIRST_ROW))
            self.tabs[name] = tab
        return ws, tab

    def configured_title(self, index):
        if 0 <= index < len(self.tab_titles):
            return self.tab_titles[index]
        return None


def resolve_tab(session):
    """현재 결과 집합이 들어갈 시트를 정한다.

    Returns:
        tuple: (worksheet, tab, new_sheet, configured_title)
    """
    if session.pinned_sheet and session.pinned_sheet in session.tab_names:
        index = session.tab_names.index(session.pinned_sheet)
    else:
        index = session.result_set_number - 1

    if not 0 <= index < len(session.tab_names):
        ws, tab = session.create_sheet()
        return ws, tab, True, None

    # 설정 순서대로 시트가 놓이도록 앞쪽 탭 중 없는 것을 먼저 만든다
    for i in range(index):
        name = session.tab_names[i]
        if session.has_sheet(name):
            continue
        title = session.configured_title(i)
        ws, tab = session.create_sheet(name, title)
        if title is not None:
            write_title(session.style_cache, ws, title)

    name = session.tab_names[index]
    title = session.configured_title(index)
    if session.has_sheet(name):
        ws, tab = session.get_sheet(name)
        return ws, tab, False, title
    ws, tab = session.create_sheet(name, title)
    return ws, tab, True, title


def _clean_text(value):
    return ILLEGAL_CHARACTERS_RE.sub("", value)


def write_text_cell(ws, row, column, value):
    cell = ws.cell(row=row, column=column)
    cell.value = _clean_text(value)
    cell.data_type = "s"  # '='로 시작해도 수식이 아닌 문자열
    return cell


def write_numeric_cell(ws, row, column, value, type_tag):
    """숫자 열 값을 float으로 바꿔 정수/소수 서식으로 쓴다. 변환 실패 시 문자열로 쓴다."""
    try:
        number = float(value)
    except ValueError:
        logger.warning("숫자로 변환할 수 없어 문자열로 씁니다: %r (%s%d)",
                       value, get_column_letter(column), row)
        return write_text_cell(ws, row, column, value)

    cell = ws.cell(row=row, column=column, value=number)
    cell.number_format = FRACTIONAL_FORMAT if type_tag == TYPE_FRACTIONAL else INTEGER_FORMAT
    cell.alignment = _RIGHT_ALIGN
    return cell


def write_styled_cell(style_cache, ws, row, column, value):
    """지시자가 붙은 값을 서식 셀로 쓴다.

    Returns:
        tuple|None: 병합할 범위 (start_row, start_column, end_row, end_column). 병합 없으면 None.
    """
    directive = parse_directive(value)
    cell = write_text_cell(ws, row, column, directive.text)
    cell.font = style_cache.get_or_create(directive)
    if directive.center:
        cell.alignment = _CENTER_ALIGN
    if directive.merge_span:
        return (row, column, row, column + directive.merge_span)
    return None


def merge(ws, span):
    if span is not None:
        start_row, start_column, end_row, end_column = span
        ws.merge_cells(start_row=start_row, start_column=start_column,
                       end_row=end_row, end_column=end_column)


def write_title(style_cache, ws, title):
    merge(ws, write_styled_cell(style_cache, ws, FIRST_ROW, 1, title))


def autosize_columns(ws, count):
    """병합 셀을 제외한 각 열의 가장 긴 값에 맞춰 열 너비를 정한다."""
    for column in range(1, count + 1):
        longest = 0
        for (cell,) in ws.iter_rows(min_col=column, max_col=column):
            if cell.value is None or cell.coordinate in ws.merged_cells:
                continue
            longest = max(longest, len(str(cell.value)))
        if longest:
            ws.column_dimensions[get_column_letter(column)].width = longest + 2


class WorkbookRenderer(Renderer):
    """결과 집합마다 시트를 정하고 행을 이어 쓴다. 파일 저장은 WorkbookSession 담당."""

    def __init__(self, config, session):
        super().__init__(config)
        self.session = session
        self.sheet = None
        self.tab = None

    def begin_result_set(self, columns, widths, page=1):
        session = self.session
        if page == 1:
            session.result_set_number += 1

        ws, tab, new_sheet, configured_title = resolve_tab(session)
        self.sheet = ws
        self.tab = tab
        logger.debug("결과 집합 %d → 시트 %s (새 시트: %s, 페이지 %d)",
                     session.result_set_number, ws.title, new_sheet, page)

        if (not session.append or session.increment_tab) and new_sheet:
            title = configured_title if configured_title is not None else self.title
            if title is not None:
                write_title(session.style_cache, ws, title)
            if self.headings:
                row = tab.next_row()
                for column, descriptor in enumerate(columns, start=1):
                    write_text_cell(ws, row, column, descriptor.name)

    def emit_row(self, values, type_tags):
        ws = self.sheet
        row = self.tab.next_row()
        spans = []
        for column, (value, type_tag) in enumerate(zip(values, type_tags), start=1):
            if value == NULL_MARKER:
                continue
            if is_numeric_type(type_tag):
                write_numeric_cell(ws, row, column, value, type_tag)
            elif value.startswith("{"):
                spans.append(write_styled_cell(self.session.style_cache, ws, row, column, value))
            else:
                write_text_cell(ws, row, column, value)
        # 병합된 셀은 읽기 전용이 되므로 행을 다 쓴 뒤 병합한다
        for span in spans:
            merge(ws, span)

    def end_result_set(self, widths):
        autosize_columns(self.sheet, len(widths))

    def emit_update_count(self, count):
        logger.info("Updated: %d", count)
