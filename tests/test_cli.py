import io
import sqlite3

import pytest
from openpyxl import load_workbook

from querytool import cli
from querytool.config import FORMAT_XLS


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)


@pytest.fixture
def database(tmp_path):
    path = str(tmp_path / "data.db")
    conn = sqlite3.connect(path)
    conn.execute("create table sales (region text, amount real)")
    conn.executemany("insert into sales values (?, ?)", [("north", 10.5), ("south", 7.25)])
    conn.commit()
    conn.close()
    return path


class TestBuildConfig:
    def test_제목에_기본_지시자(self):
        args = cli.build_parser().parse_args(["db", "-t", "Report"])
        assert cli.build_config(args).title == "{BUC3>6}Report"

    def test_탭은_스프레드시트에서만(self):
        args = cli.build_parser().parse_args(["db", "-T", "[A][B]"])
        assert cli.build_config(args).tabs == ()
        args = cli.build_parser().parse_args(["db", "-f", "XLS", "-o", "x.xlsx", "-T", "[A][B]"])
        config = cli.build_config(args)
        assert config.output_format == FORMAT_XLS
        assert config.tab_names == ["A", "B"]

    def test_헤더_끄기와_옵션들(self):
        args = cli.build_parser().parse_args(["db", "-H", "-a", "-i", "-r", "-S", "Main"])
        config = cli.build_config(args)
        assert config.headings is False
        assert config.append is True
        assert config.increment_tab is True
        assert config.results_only is True
        assert config.sheet_name == "Main"


class TestMain:
    def test_텍스트_출력(self, database, capsys):
        status = cli.main([database, "-q"], stdin=io.StringIO("select region from sales order by region\n"))
        assert status == cli.EXIT_OK
        out = capsys.readouterr().out
        assert "| region |" in out
        assert "| north  |" in out

    def test_CSV_파일_출력(self, database, tmp_path):
        out = tmp_path / "out.csv"
        status = cli.main([database, "-f", "csv", "-o", str(out)],
                          stdin=io.StringIO("select region, amount from sales order by region\n"))
        assert status == cli.EXIT_OK
        assert out.read_text(encoding="utf-8") == "region,amount\nnorth,10.5\nsouth,7.25\n"

    def test_스프레드시트는_출력_파일_필요(self, database):
        assert cli.main([database, "-f", "xls"], stdin=io.StringIO("")) == cli.EXIT_USAGE

    def test_출력_파일_열기_실패(self, database, tmp_path):
        bad = str(tmp_path / "missing" / "out.txt")
        status = cli.main([database, "-o", bad], stdin=io.StringIO("select 1\n"))
        assert status == cli.EXIT_FATAL

    def test_연결_실패(self, tmp_path):
        bad = str(tmp_path / "missing" / "data.db")
        assert cli.main([bad], stdin=io.StringIO("")) == cli.EXIT_CONNECT

    def test_스프레드시트_두_번_실행__이어쓰기(self, database, tmp_path):
        out = str(tmp_path / "report.xlsx")
        argv = [database, "-f", "xls", "-o", out, "-a", "-T", "[Sales|{B}Sales Report]"]
        query = "select region, amount from sales order by region\n"

        assert cli.main(argv, stdin=io.StringIO(query)) == cli.EXIT_OK
        assert cli.main(argv, stdin=io.StringIO(query)) == cli.EXIT_OK

        ws = load_workbook(out)["Sales"]
        assert ws["A1"].value == "Sales Report"
        assert [ws.cell(r, 1).value for r in range(2, ws.max_row + 1)] == [
            "region", "north", "south", "north", "south",
        ]

    def test_잘못된_시트_이름__탭_없이_계속(self, database, tmp_path):
        out = str(tmp_path / "report.xlsx")
        argv = [database, "-f", "xls", "-o", out, "-T", "[Sales/2024]"]
        assert cli.main(argv, stdin=io.StringIO("select 1 as n\n")) == cli.EXIT_OK

        wb = load_workbook(out)
        assert "Sales/2024" not in wb.sheetnames
        assert wb.worksheets[0]["A2"].value == "n"
        assert wb.worksheets[0]["A3"].value == 1
