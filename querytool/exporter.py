"""문장 하나의 결과 집합들을 페이지 단위로 렌더러에 흘려 보낸다."""

from querytool.config import FORMAT_CSV, FORMAT_HTML, FORMAT_TEXT, FORMAT_XLS
from querytool.logger import get_logger
from querytool.renderers import CsvRenderer, HtmlRenderer, TextRenderer
from querytool.result_matrix import PAGE_SIZE, ResultMatrix
from querytool.workbook import WorkbookRenderer

logger = get_logger("exporter")

_STREAM_RENDERERS = {
    FORMAT_TEXT: TextRenderer,
    FORMAT_CSV: CsvRenderer,
    FORMAT_HTML: HtmlRenderer,
}


def create_renderer(config, stream=None, session=None):
    """설정된 출력 형식에 맞는 렌더러를 한 번만 고른다."""
    if config.output_format == FORMAT_XLS:
        if session is None:
            raise ValueError("스프레드시트 출력에는 WorkbookSession이 필요합니다")
        return WorkbookRenderer(config, session)
    return _STREAM_RENDERERS[config.output_format](config, stream)


def _log_warnings(result_set):
    for message in result_set.drain_warnings():
        logger.warning("Warning: %s", message)


def _flush_page(renderer, matrix, page):
    widths = matrix.widths()
    renderer.begin_result_set(matrix.columns, widths, page)
    type_tags = matrix.type_tags
    for values in matrix:
        renderer.emit_row(values, type_tags)
    renderer.end_result_set(widths)


def render_result_set(renderer, result_set, page_size=PAGE_SIZE):
    """결과 집합 하나를 렌더링한다. 행이 page_size를 넘으면 페이지마다 헤더부터 다시 찍는다.

    Returns:
        int: 렌더링한 행 수
    """
    _log_warnings(result_set)
    columns = result_set.columns()
    matrix = ResultMatrix(columns, page_size)
    page = 1
    total = 0

    while True:
        row = result_set.next_row()
        if row is None:
            break
        try:
            matrix.append(row)
        except OverflowError:
            _flush_page(renderer, matrix, page)
            page += 1
            matrix = ResultMatrix(columns, page_size)
            matrix.append(row)
        total += 1
        _log_warnings(result_set)

    # 행이 하나도 없어도 헤더는 한 번 출력한다
    if len(matrix) or page == 1:
        _flush_page(renderer, matrix, page)

    logger.debug("결과 집합 렌더링: %d행, %d페이지", total, page)
    return total


def render_statement(renderer, results, title=None, headings=True, results_only=False,
                     page_size=PAGE_SIZE):
    """문장 하나가 만든 결과(결과 집합 또는 갱신 건수)를 문서 하나로 렌더링한다.

    Args:
        renderer: Renderer 구현
        results: ResultSetHandle 또는 int(갱신 건수)의 반복자
        title: 문서 제목 (스타일 지시자 포함 가능)
        headings: 헤더/제목 출력 여부
        results_only: True면 갱신 건수를 출력하지 않는다
    """
    renderer.begin_document(title, headings)
    result_sets = 0
    for result in results:
        if isinstance(result, int):
            if not results_only:
                renderer.emit_update_count(result)
            continue
        render_result_set(renderer, result, page_size)
        result_sets += 1
    renderer.end_document()
    return result_sets
