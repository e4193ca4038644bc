import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def setup_logging(level=logging.INFO, log_file=None):
    """로깅 설정을 초기화한다. 콘솔(stderr)과 선택적 파일 핸들러를 등록한다.

    stdout은 쿼리 결과 출력에 쓰이므로 콘솔 로그는 stderr로 보낸다.
    """
    root_logger = logging.getLogger("querytool")
    root_logger.setLevel(level)

    if root_logger.handlers:
        return root_logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger


def get_logger(name):
    """모듈별 로거를 반환한다."""
    return logging.getLogger(f"querytool.{name}")
