import logging

import pytest

from querytool.config import FORMAT_CSV, FORMAT_HTML, FORMAT_XLS, OutputConfig
from querytool.exporter import create_renderer, render_result_set, render_statement
from querytool.renderers import CsvRenderer, HtmlRenderer, TextRenderer
from querytool.result_matrix import TYPE_OTHER
from querytool.workbook import WorkbookRenderer, WorkbookSession


class TestCreateRenderer:
    def test_형식별_렌더러(self, buf, tmp_path):
        assert isinstance(create_renderer(OutputConfig(), buf), TextRenderer)
        assert isinstance(create_renderer(OutputConfig(output_format=FORMAT_CSV), buf), CsvRenderer)
        assert isinstance(create_renderer(OutputConfig(output_format=FORMAT_HTML), buf), HtmlRenderer)
        config = OutputConfig(output_format=FORMAT_XLS, output_file=str(tmp_path / "o.xlsx"))
        renderer = create_renderer(config, session=WorkbookSession(config))
        assert isinstance(renderer, WorkbookRenderer)

    def test_스프레드시트_세션_없음__ValueError(self):
        with pytest.raises(ValueError):
            create_renderer(OutputConfig(output_format=FORMAT_XLS, output_file="x.xlsx"))


class TestPagination:
    def test_페이지마다_헤더와_너비_재계산(self, buf, make_result_set):
        rs = make_result_set([("c", TYPE_OTHER)], [["a"], ["b"], ["ccc"], ["d"], ["e"]])
        renderer = TextRenderer(OutputConfig(), buf)
        renderer.begin_document(None, True)
        total = render_result_set(renderer, rs, page_size=2)

        lines = buf.getvalue().splitlines()
        assert total == 5
        assert lines.count("| c |") == 2
        assert lines.count("| c   |") == 1
        assert "-------" in lines  # 두 번째 페이지는 너비 3
        assert lines[:6] == ["-----", "| c |", "-----", "| a |", "| b |", "-----"]

    def test_페이지_경계에서_빈_페이지_없음(self, buf, make_result_set):
        rs = make_result_set([("c", TYPE_OTHER)], [["w"], ["x"], ["y"], ["z"]])
        renderer = TextRenderer(OutputConfig(), buf)
        renderer.begin_document(None, True)
        assert render_result_set(renderer, rs, page_size=2) == 4
        page = ["-----", "| c |", "-----"]
        assert buf.getvalue().splitlines() == (
            page + ["| w |", "| x |", "-----"]
            + page + ["| y |", "| z |", "-----"]
        )

    def test_행_없음__헤더만(self, buf, make_result_set):
        rs = make_result_set([("name", TYPE_OTHER)], [])
        renderer = TextRenderer(OutputConfig(), buf)
        renderer.begin_document(None, True)
        assert render_result_set(renderer, rs) == 0
        assert buf.getvalue().splitlines() == ["--------", "| name |", "--------", "--------"]

    def test_경고는_로그로(self, buf, make_result_set, caplog):
        rs = make_result_set([("c", TYPE_OTHER)], [["a"]], warnings=["truncated value"])
        renderer = TextRenderer(OutputConfig(), buf)
        with caplog.at_level(logging.WARNING, logger="querytool.exporter"):
            render_result_set(renderer, rs)
        assert "truncated value" in caplog.text


class TestRenderStatement:
    def test_여러_결과_집합과_갱신_건수(self, buf, make_result_set):
        results = [
            make_result_set([("a", TYPE_OTHER)], [["1"]]),
            5,
            make_result_set([("b", TYPE_OTHER)], [["2"]]),
        ]
        renderer = CsvRenderer(OutputConfig(output_format=FORMAT_CSV), buf)
        count = render_statement(renderer, results)
        assert count == 2
        assert buf.getvalue() == "a\n1\n\nUpdated: 5\n\nb\n2\n"

    def test_결과만_출력__갱신_건수_생략(self, buf):
        renderer = CsvRenderer(OutputConfig(output_format=FORMAT_CSV), buf)
        render_statement(renderer, [3], results_only=True)
        assert buf.getvalue() == ""

    def test_HTML_문서는_문장마다_한_번(self, buf, make_result_set):
        results = [
            make_result_set([("a", TYPE_OTHER)], [["1"]]),
            make_result_set([("b", TYPE_OTHER)], [["2"]]),
        ]
        renderer = HtmlRenderer(OutputConfig(output_format=FORMAT_HTML), buf)
        render_statement(renderer, results, title="T")
        out = buf.getvalue()
        assert out.count("<html>") == 1
        assert out.count("</html>") == 1
        assert out.count('<table width="100%">') == 3  # 제목 표 + 결과 표 2개
