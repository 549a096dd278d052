from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from dotenv import dotenv_values

from .logging_utils import get_logger


logger = get_logger(__name__)

ENV_FILES_DEFAULT_ORDER = [".env", ".env.secrets"]


def _get_bool(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_int(environ: Mapping[str, str], name: str, default: int, minimum: int = 1) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} 는 정수여야 합니다.") from e
    if value < minimum:
        raise ValueError(f"{name} 는 {minimum} 이상이어야 합니다.")
    return value


def _get_list(environ: Mapping[str, str], name: str, default: List[str]) -> List[str]:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return list(default)
    return [p.strip() for p in raw.split(",") if p.strip()]


@dataclass
class ProvisionConfig:
    env_files: List[str]
    fieldset_file: Optional[str] = None
    include_process_env: bool = True
    redact_min_length: int = 4

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProvisionConfig":
        env = os.environ if environ is None else environ
        return cls(
            env_files=_get_list(env, "PROVISION_ENV_FILES", ENV_FILES_DEFAULT_ORDER),
            fieldset_file=env.get("PROVISION_FIELDSET_FILE") or None,
            include_process_env=_get_bool(env, "PROVISION_INCLUDE_PROCESS_ENV", True),
            redact_min_length=_get_int(env, "PROVISION_REDACT_MIN_LENGTH", 4),
        )


def load_environment_snapshot(
    base_dir: str = ".",
    files: Optional[List[str]] = None,
    include_process_env: bool = True,
) -> Dict[str, str]:
    """
    점검에 사용할 환경변수 스냅샷(dict)을 만든다.

    프로세스 환경변수를 먼저 깔고, 그 위에 .env 계열 파일을 순서대로 덮어쓴다.
    (후순위 파일이 같은 키를 덮어쓴다.) os.environ 자체는 변경하지 않는다.
    """
    snapshot: Dict[str, str] = {}
    if include_process_env:
        snapshot.update(os.environ)

    order = ENV_FILES_DEFAULT_ORDER if files is None else files
    for name in order:
        path = os.path.join(base_dir, name)
        if not os.path.exists(path):
            logger.debug("env 파일이 없어 건너뜁니다: %s", path)
            continue
        loaded = 0
        for key, value in dotenv_values(dotenv_path=path).items():
            # None 은 dotenv 에서 값이 없는 키를 의미하므로 스킵
            if value is None:
                continue
            snapshot[key] = value
            loaded += 1
        logger.debug("env 파일 로드: %s (키 %d개)", path, loaded)

    return snapshot
