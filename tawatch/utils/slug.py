"""슬러그 생성 유틸리티.

URL slug helper. Folds Vietnamese diacritics ("Đồng hồ nam" -> "dong-ho-nam").
"""

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str, max_length: int = 200) -> str:
    """문자열을 URL 슬러그로 변환합니다.

    Example:
        slugify("Seiko 5 Sports — Automatic")  # "seiko-5-sports-automatic"
    """
    # đ/Đ는 NFKD 분해가 되지 않으므로 먼저 치환 (đ has no decomposition)
    value = value.replace("đ", "d").replace("Đ", "D")
    normalized = unicodedata.normalize("NFKD", value)
    ascii_only = normalized.encode("ascii", "ignore").decode("ascii").lower()
    slug = _NON_ALNUM.sub("-", ascii_only).strip("-")
    return slug[:max_length].rstrip("-")
