"""
validators
----------

필드 종류별 구조 검사. 모든 검사는 (ok, reason) 을 반환하며,
reason 은 고정 문구만 사용한다. 값 자체를 메시지에 담지 않는다.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import urlsplit

from .fields import ConfigField, FieldKind


CheckResult = Tuple[bool, Optional[str]]

RECOGNIZED_URL_SCHEMES = frozenset({"http", "https"})

_PEM_BLOCK_RE = re.compile(
    r"-----BEGIN ([A-Z0-9 ]*KEY)-----.+?-----END \1-----",
    re.DOTALL,
)


def check_plain_string(value: str, cfg_field: ConfigField) -> CheckResult:  # noqa: ARG001
    if not value.strip():
        return False, "빈 문자열입니다."
    return True, None


def check_url_string(value: str, cfg_field: ConfigField) -> CheckResult:  # noqa: ARG001
    try:
        parts = urlsplit(value.strip())
    except ValueError:
        return False, "URL 로 해석할 수 없습니다."
    if parts.scheme.lower() not in RECOGNIZED_URL_SCHEMES:
        return False, "http/https 절대 URL 이 아닙니다."
    if not parts.hostname:
        return False, "URL 에 호스트가 없습니다."
    return True, None


def has_pem_key_markers(text: str) -> bool:
    """BEGIN/END 마커가 같은 키 라벨로 짝을 이루는지 확인한다."""
    return _PEM_BLOCK_RE.search(text) is not None


def check_base64_pem_key(value: str, cfg_field: ConfigField) -> CheckResult:  # noqa: ARG001
    compact = "".join(value.split())
    if not compact:
        return False, "빈 문자열입니다."
    try:
        decoded = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        return False, "base64 로 디코딩할 수 없습니다."
    try:
        text = decoded.decode("utf-8")
    except UnicodeDecodeError:
        return False, "디코딩 결과가 텍스트가 아닙니다."
    if not has_pem_key_markers(text):
        return False, "PEM 키 경계 마커가 없습니다."
    return True, None


def check_pem_key(value: str, cfg_field: ConfigField) -> CheckResult:  # noqa: ARG001
    # 레거시 형식: 줄바꿈이 리터럴 "\n" 으로 들어오는 경우가 있다.
    text = value.replace("\\n", "\n")
    if not has_pem_key_markers(text):
        return False, "PEM 키 경계 마커가 없습니다."
    return True, None


def check_enum(value: str, cfg_field: ConfigField) -> CheckResult:
    if value not in cfg_field.allowed:
        return False, "허용된 값이 아닙니다."
    return True, None


CHECKS: Dict[FieldKind, Callable[[str, ConfigField], CheckResult]] = {
    FieldKind.PLAIN_STRING: check_plain_string,
    FieldKind.URL_STRING: check_url_string,
    FieldKind.BASE64_PEM_KEY: check_base64_pem_key,
    FieldKind.PEM_KEY: check_pem_key,
    FieldKind.ENUM: check_enum,
}


def check_value(value: str, cfg_field: ConfigField) -> CheckResult:
    return CHECKS[cfg_field.kind](value, cfg_field)
