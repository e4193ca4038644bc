"""스프레드시트 렌더러 전용 글꼴 캐시."""

from openpyxl.styles import Font

from querytool.logger import get_logger

logger = get_logger("style_cache")


class StyleCache:
    """플래그 조합(제목 단계 + B/I/U)별 글꼴을 세션 동안 한 번만 만든다.

    가운데 정렬과 병합은 키에 포함되지 않으므로 셀마다 따로 적용해야 한다.
    """

    def __init__(self):
        self._fonts = {}

    def get_or_create(self, directive):
        key = directive.key
        font = self._fonts.get(key)
        if font is None:
            font = Font(
                size=directive.font_size,
                bold=directive.bold,
                italic=directive.italic,
                underline="single" if directive.underline else None,
            )
            self._fonts[key] = font
            logger.debug("글꼴 스타일 생성: %s (%dpt)", key, directive.font_size)
        return font

    def __contains__(self, key):
        return key in self._fonts

    def __len__(self):
        return len(self._fonts)
