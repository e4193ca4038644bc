"""텍스트/CSV/HTML 스트림 렌더러.

모든 렌더러는 같은 순서로 호출된다:
    begin_document → (begin_result_set → emit_row* → end_result_set)* → end_document
결과 집합이 페이지로 나뉘면 begin_result_set ~ end_result_set 구간이 페이지마다 반복된다.
"""

import os

from querytool.logger import get_logger
from querytool.style_directive import directive_text

logger = get_logger("renderers")

DEFAULT_CSS_FILE = os.path.join(os.path.dirname(__file__), "style.css")


class Renderer:
    """출력 형식별 렌더러의 공통 계약. 기본 구현은 아무것도 하지 않는다."""

    def __init__(self, config, stream=None):
        self.config = config
        self.stream = stream
        self.title = None
        self.headings = config.headings

    def writeln(self, text=""):
        self.stream.write(text + "\n")

    def begin_document(self, title, headings):
        self.title = title
        self.headings = headings

    def begin_result_set(self, columns, widths, page=1):
        pass

    def emit_row(self, values, type_tags):
        pass

    def end_result_set(self, widths):
        pass

    def end_document(self):
        pass

    def emit_update_count(self, count):
        self.writeln()
        self.writeln(f"Updated: {count}")
        self.writeln()


class TextRenderer(Renderer):
    """고정폭 텍스트 표. 각 열은 너비만큼 공백으로 채우고 '|'로 구분한다."""

    def __init__(self, config, stream=None):
        super().__init__(config, stream)
        self._widths = []

    def divider(self, widths):
        return "-" + "".join("-" * (width + 3) for width in widths)

    def format_row(self, values, widths):
        cells = "".join(f" {value.ljust(width)} |" for value, width in zip(values, widths))
        return "|" + cells

    def begin_result_set(self, columns, widths, page=1):
        self._widths = widths
        if not self.headings:
            return
        self.writeln(self.divider(widths))
        self.writeln(self.format_row([column.name for column in columns], widths))
        self.writeln(self.divider(widths))

    def emit_row(self, values, type_tags):
        self.writeln(self.format_row(values, self._widths))

    def end_result_set(self, widths):
        self.writeln(self.divider(widths))


class CsvRenderer(Renderer):
    """쉼표로만 이어 붙인다. 값 안의 쉼표나 따옴표를 이스케이프하지 않는다."""

    def begin_result_set(self, columns, widths, page=1):
        if not self.headings:
            return
        if self.title is not None:
            self.writeln(directive_text(self.title))
        self.writeln(",".join(column.name for column in columns))

    def emit_row(self, values, type_tags):
        self.writeln(",".join(values))


class HtmlRenderer(Renderer):
    """HTML 표. CSV와 마찬가지로 값과 제목을 이스케이프하지 않고 그대로 쓴다."""

    def __init__(self, config, stream=None):
        super().__init__(config, stream)
        self._head_written = False

    def _read_css(self):
        """CSS 파일 내용을 읽는다. 실패하면 로그만 남기고 None."""
        path = self.config.css_file or DEFAULT_CSS_FILE
        try:
            with open(path, encoding="utf-8") as f:
                return f.read()
        except OSError as exc:
            logger.warning("CSS 파일을 읽을 수 없어 스타일 없이 출력합니다: %s (%s)", path, exc)
            return None

    def begin_document(self, title, headings):
        super().begin_document(title, headings)
        if not headings:
            return
        text = directive_text(title)
        self.writeln(
            f"<html><head><title>{text or ''}</title>"
            '<meta http-equiv="content-type" content="text/html;charset=UTF-8"/>'
        )
        css = self._read_css()
        if css is not None:
            self.writeln("<style>")
            self.writeln(css.rstrip("\n"))
            self.writeln("</style>")
        self.writeln("</head>")
        self.writeln("<body>")
        if text:
            self.writeln('<table width="100%">')
            self.writeln(f'<tr><th class="title">{text}</th></tr>')
            self.writeln("</table>")
        self._head_written = True

    def begin_result_set(self, columns, widths, page=1):
        self.writeln('<table width="100%">')
        if self.headings:
            cells = "".join(f'<th align="center">{column.name}</th>' for column in columns)
            self.writeln(f"<tr>{cells}</tr>")

    def emit_row(self, values, type_tags):
        cells = "".join(f'<td align="center">{value}</td>' for value in values)
        self.writeln(f"<tr>{cells}</tr>")

    def end_result_set(self, widths):
        self.writeln("</table>")
        self.writeln()

    def end_document(self):
        if not self._head_written:
            return
        self.writeln("</body>")
        self.writeln("</html>")
        self._head_written = False
