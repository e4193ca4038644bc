"""명령줄 진입점: querytool [옵션] DATABASE"""

import argparse
import logging
import sqlite3
import sys

from querytool.config import (
    FORMAT_TEXT,
    FORMAT_XLS,
    OUTPUT_FORMATS,
    OutputConfig,
    normalize_title,
    parse_tab_spec,
)
from querytool.errors import OutputError
from querytool.logger import get_logger, setup_logging
from querytool.shell import QueryShell, read_statements

logger = get_logger("cli")

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_CONNECT = 2
EXIT_FATAL = 3
EXIT_CLOSE = 4


def build_parser():
    parser = argparse.ArgumentParser(
        prog="querytool",
        description="SQL 문장을 실행하고 결과를 텍스트/CSV/HTML/스프레드시트로 출력한다.",
    )
    parser.add_argument("database", help="SQLite 데이터베이스 파일 경로 (':memory:' 가능)")
    parser.add_argument("-f", "--format", dest="output_format", type=str.lower,
                        choices=OUTPUT_FORMATS, default=FORMAT_TEXT, help="출력 형식")
    parser.add_argument("-o", "--output", dest="output_file", help="출력 파일 (xls 형식은 필수)")
    parser.add_argument("-H", "--no-headings", dest="headings", action="store_false",
                        help="제목과 헤더를 출력하지 않는다")
    parser.add_argument("-t", "--title", help="문서 제목. '{'로 시작하지 않으면 {BUC3>6}가 붙는다")
    parser.add_argument("-s", "--css", dest="css_file", help="HTML에 넣을 CSS 파일")
    parser.add_argument("-a", "--append", action="store_true", help="기존 워크북에 이어 쓴다")
    parser.add_argument("-i", "--increment-tab", action="store_true",
                        help="문장이 바뀌어도 결과 집합 번호를 이어간다")
    parser.add_argument("-T", "--tabs", help="시트 이름/제목: \"[이름|제목][이름2]...\"")
    parser.add_argument("-S", "--sheet", dest="sheet_name", help="결과를 쓸 시트 이름을 고정한다")
    parser.add_argument("-r", "--results-only", action="store_true",
                        help="갱신 건수(Updated: N)를 출력하지 않는다")
    parser.add_argument("-q", "--quiet", action="store_true", help="프롬프트를 표시하지 않는다")
    parser.add_argument("-v", "--verbose", action="store_true", help="디버그 로그 출력")
    parser.add_argument("--log-file", help="로그를 함께 기록할 파일")
    return parser


def build_config(args):
    """파싱된 인자로 OutputConfig를 만든다. 탭 지정은 스프레드시트 형식에서만 쓴다."""
    tabs = ()
    if args.output_format == FORMAT_XLS and args.tabs:
        tabs = parse_tab_spec(args.tabs)
    return OutputConfig(
        output_format=args.output_format,
        headings=args.headings,
        title=normalize_title(args.title),
        css_file=args.css_file,
        append=args.append,
        increment_tab=args.increment_tab,
        tabs=tabs,
        sheet_name=args.sheet_name,
        results_only=args.results_only,
        output_file=args.output_file,
    )


def open_output(config):
    """텍스트 계열 출력 스트림을 연다. 파일을 열 수 없으면 OutputError."""
    if config.output_format == FORMAT_XLS or not config.output_file:
        return sys.stdout
    try:
        return open(config.output_file, "w", encoding="utf-8", newline="")
    except OSError as exc:
        raise OutputError(config.output_file, exc) from exc


def main(argv=None, stdin=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    if args.output_format == FORMAT_XLS and not args.output_file:
        parser.print_usage(sys.stderr)
        logger.error("xls 형식에는 -o/--output 이 필요합니다")
        return EXIT_USAGE

    config = build_config(args)

    try:
        connection = sqlite3.connect(args.database)
    except sqlite3.Error as exc:
        logger.error("데이터베이스에 연결할 수 없습니다: %s", exc)
        return EXIT_CONNECT

    stdin = stdin if stdin is not None else sys.stdin
    prompt = None if args.quiet or not stdin.isatty() else f"{args.database}> "
    status = EXIT_OK
    stream = None
    try:
        stream = open_output(config)
        shell = QueryShell(connection, config, stream)
        shell.run(read_statements(stdin, prompt, echo=sys.stderr))
    except OutputError as exc:
        logger.error("%s", exc)
        status = EXIT_FATAL
    finally:
        if stream is not None and stream is not sys.stdout:
            stream.close()

    try:
        connection.close()
    except sqlite3.Error as exc:
        logger.error("연결을 닫는 중 오류: %s", exc)
        return EXIT_CLOSE
    return status


if __name__ == "__main__":
    sys.exit(main())
