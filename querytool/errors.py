"""querytool 공통 예외."""


class QueryToolError(Exception):
    """querytool 예외의 기반 클래스."""


class OutputError(QueryToolError):
    """출력 파일이나 워크북을 열거나 쓸 수 없을 때 발생한다. 치명적 오류로 취급한다."""

    def __init__(self, path, cause=None):
        self.path = path
        self.cause = cause
        message = f"출력 파일을 쓸 수 없습니다: '{path}'"
        if cause is not None:
            message += f" ({cause})"
        super().__init__(message)
