"""문장을 한 줄씩 읽어 실행하고 렌더링하는 루프."""

import sqlite3
import sys

from querytool.config import FORMAT_XLS
from querytool.db import execute_statement
from querytool.exporter import create_renderer, render_statement
from querytool.logger import get_logger
from querytool.workbook import WorkbookSession

logger = get_logger("shell")

EXIT_COMMANDS = ("quit", "exit")


def read_statements(infile, prompt=None, echo=None):
    """입력 스트림에서 문장을 한 줄씩 읽는다. 빈 줄은 건너뛰고 quit/exit에서 멈춘다."""
    while True:
        if prompt and echo is not None:
            echo.write(prompt)
            echo.flush()
        line = infile.readline()
        if not line:
            break
        statement = line.strip()
        if not statement:
            continue
        if statement.lower() in EXIT_COMMANDS:
            break
        yield statement


class QueryShell:
    """연결 하나로 문장을 실행하고 설정된 형식으로 결과를 출력한다.

    문장 실행 오류(db_errors)는 로그만 남기고 다음 문장으로 넘어간다.
    출력 파일 오류(OutputError)는 호출자에게 그대로 전달된다.
    """

    def __init__(self, connection, config, stream=None, db_errors=(sqlite3.Error,)):
        self.connection = connection
        self.cursor = connection.cursor()
        self.config = config
        self.stream = stream if stream is not None else sys.stdout
        self.db_errors = db_errors
        self.session = WorkbookSession(config) if config.output_format == FORMAT_XLS else None
        self.renderer = create_renderer(config, self.stream, self.session)
        self.executed = 0
        self.failed = 0

    def _document_settings(self):
        if self.session is not None and self.session.suppress_headings:
            return None, False
        return self.config.title, self.config.headings

    def execute(self, sql):
        if self.session is not None:
            self.session.begin_statement()

        results = execute_statement(self.cursor, sql)
        title, headings = self._document_settings()
        render_statement(
            self.renderer,
            results,
            title=title,
            headings=headings,
            results_only=self.config.results_only,
        )
        self.connection.commit()

        if self.session is not None:
            self.session.end_statement()
        self.stream.flush()
        self.executed += 1

    def run(self, statements):
        for sql in statements:
            try:
                self.execute(sql)
            except self.db_errors as exc:
                self.failed += 1
                logger.error("Error: %s", exc)
        logger.info("실행 완료: %d건 성공, %d건 실패", self.executed, self.failed)
        return self.failed
