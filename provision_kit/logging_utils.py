import logging
import sys
from typing import Iterable, List, Optional


REDACTED = "***"


def setup_logging(verbosity: int = 0) -> None:
    level = logging.INFO
    if verbosity >= 1:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class SecretRedactingFilter(logging.Filter):
    """
    로그 메시지에 등록된 secret 값이 섞여 들어가면 *** 로 치환한다.
    min_length 보다 짧은 값은 오탐이 많아 등록하지 않는다.
    """

    def __init__(self, secrets: Iterable[str] = (), min_length: int = 4) -> None:
        super().__init__()
        self.min_length = min_length
        self._secrets: List[str] = []
        self.add_secrets(secrets)

    def add_secrets(self, secrets: Iterable[str]) -> None:
        for value in secrets:
            if value and len(value) >= self.min_length and value not in self._secrets:
                self._secrets.append(value)
        # 긴 값부터 치환해야 부분 문자열이 남지 않는다.
        self._secrets.sort(key=len, reverse=True)

    def redact(self, text: str) -> str:
        for value in self._secrets:
            if value in text:
                text = text.replace(value, REDACTED)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def install_secret_filter(
    secrets: Iterable[str],
    min_length: int = 4,
    logger: Optional[logging.Logger] = None,
) -> SecretRedactingFilter:
    """
    root 로거(또는 지정한 로거)의 모든 핸들러에 redaction 필터를 붙인다.
    핸들러에 이미 붙어 있는 필터는 새 필터로 교체하여 중복 등록되지 않게 한다.
    """
    target = logger or logging.getLogger()
    flt = SecretRedactingFilter(secrets, min_length=min_length)
    for handler in target.handlers:
        for old in [f for f in handler.filters if isinstance(f, SecretRedactingFilter)]:
            handler.removeFilter(old)
        handler.addFilter(flt)
    return flt
