"""
fields
------

점검 대상 환경변수의 선언(필드/그룹/필드셋)을 정의하는 모듈.
필드셋은 프로세스 시작 시 한 번 정적으로 만들어지며,
이름 중복 같은 정의 오류는 검증 시점이 아니라 생성 시점에 바로 실패한다.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple


class DuplicateFieldDefinition(ValueError):
    """필드셋 정의에 같은 필드/그룹 이름이 두 번 이상 등장한 경우."""


class FieldKind(str, Enum):
    PLAIN_STRING = "plain"
    URL_STRING = "url"
    BASE64_PEM_KEY = "base64_pem"
    PEM_KEY = "pem"
    ENUM = "enum"


@dataclass(frozen=True)
class ConfigField:
    name: str
    kind: FieldKind = FieldKind.PLAIN_STRING
    required: bool = True
    allowed: Tuple[str, ...] = ()
    description: str = ""
    # 기본 이름이 없거나 값이 비어 있을 때 대신 조회할 레거시 변수
    fallback: Optional["ConfigField"] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("필드 이름이 비어 있습니다.")
        if self.kind is FieldKind.ENUM and not self.allowed:
            raise ValueError(f"ENUM 필드에는 허용값이 필요합니다: {self.name}")
        if self.kind is not FieldKind.ENUM and self.allowed:
            raise ValueError(f"허용값은 ENUM 필드에만 지정할 수 있습니다: {self.name}")

    def names(self) -> List[str]:
        """자기 자신과 fallback 체인의 이름을 조회 순서대로 반환한다."""
        out: List[str] = []
        cur: Optional[ConfigField] = self
        while cur is not None:
            out.append(cur.name)
            cur = cur.fallback
        return out


@dataclass(frozen=True)
class FieldGroup:
    name: str
    fields: Tuple[ConfigField, ...] = ()


@dataclass(frozen=True)
class FieldSet:
    groups: Tuple[FieldGroup, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        seen_groups: set[str] = set()
        seen_fields: set[str] = set()
        dup_groups: List[str] = []
        dup_fields: List[str] = []

        for group in self.groups:
            if group.name in seen_groups:
                dup_groups.append(group.name)
            seen_groups.add(group.name)
            for f in group.fields:
                for name in f.names():
                    if name in seen_fields:
                        dup_fields.append(name)
                    seen_fields.add(name)

        if dup_groups:
            raise DuplicateFieldDefinition(
                "그룹 이름이 중복되었습니다: " + ", ".join(sorted(set(dup_groups)))
            )
        if dup_fields:
            raise DuplicateFieldDefinition(
                "필드 이름이 중복되었습니다: " + ", ".join(sorted(set(dup_fields)))
            )

    def __iter__(self) -> Iterator[Tuple[FieldGroup, ConfigField]]:
        for group in self.groups:
            for f in group.fields:
                yield group, f

    def __len__(self) -> int:
        return sum(len(g.fields) for g in self.groups)

    def group_names(self) -> List[str]:
        return [g.name for g in self.groups]

    def field_names(self) -> List[str]:
        return [f.name for _, f in self]

    def select(self, group_names: Iterable[str]) -> "FieldSet":
        """
        지정한 그룹만 남긴 새 FieldSet 을 반환한다. 원래 순서를 유지한다.
        존재하지 않는 그룹 이름이 있으면 ValueError.
        """
        requested = {g for g in group_names}
        invalid = sorted(requested - set(self.group_names()))
        if invalid:
            raise ValueError(
                "잘못된 그룹 이름이 있습니다: "
                + ", ".join(invalid)
                + f"\n허용되는 그룹: {', '.join(self.group_names())}"
            )
        return FieldSet(tuple(g for g in self.groups if g.name in requested))


def _field_from_dict(raw: Any, where: str) -> ConfigField:
    if not isinstance(raw, dict):
        raise ValueError(f"필드 정의는 객체여야 합니다: {where} ({type(raw).__name__})")
    if not isinstance(raw.get("name"), str):
        raise ValueError(f"필드 정의에 문자열 name 이 없습니다: {where}")
    name = raw["name"]

    required = raw.get("required", True)
    if not isinstance(required, bool):
        raise ValueError(f"required 는 true/false 여야 합니다: {name}")

    allowed = raw.get("allowed")
    if allowed is None:
        allowed = []
    if not isinstance(allowed, list) or not all(isinstance(v, str) for v in allowed):
        raise ValueError(f"allowed 는 문자열 목록이어야 합니다: {name}")

    description = raw.get("description", "")
    if not isinstance(description, str):
        raise ValueError(f"description 은 문자열이어야 합니다: {name}")

    kind_raw = raw.get("kind", FieldKind.PLAIN_STRING.value)
    try:
        kind = FieldKind(kind_raw)
    except ValueError as e:
        kinds = ", ".join(k.value for k in FieldKind)
        raise ValueError(
            f"알 수 없는 필드 종류입니다: {name} (kind={kind_raw}, 허용: {kinds})"
        ) from e

    fallback_raw = raw.get("fallback")
    return ConfigField(
        name=name,
        kind=kind,
        required=required,
        allowed=tuple(allowed),
        description=description,
        fallback=_field_from_dict(fallback_raw, f"{name}.fallback") if fallback_raw is not None else None,
    )


def field_set_from_dict(data: Dict[str, Any]) -> FieldSet:
    raw_groups = data.get("groups", [])
    if not isinstance(raw_groups, list):
        raise ValueError("groups 는 목록이어야 합니다.")

    groups: List[FieldGroup] = []
    for i, raw_group in enumerate(raw_groups):
        if not isinstance(raw_group, dict):
            raise ValueError(f"그룹 정의는 객체여야 합니다: groups[{i}]")
        if not isinstance(raw_group.get("name"), str):
            raise ValueError(f"그룹 정의에 문자열 name 이 없습니다: groups[{i}]")
        group_name = raw_group["name"]
        raw_fields = raw_group.get("fields", [])
        if not isinstance(raw_fields, list):
            raise ValueError(f"fields 는 목록이어야 합니다: {group_name}")
        groups.append(
            FieldGroup(
                name=group_name,
                fields=tuple(
                    _field_from_dict(f, f"{group_name}.fields[{j}]") for j, f in enumerate(raw_fields)
                ),
            )
        )
    return FieldSet(tuple(groups))


def load_field_set_file(path: str) -> FieldSet:
    """
    JSON 파일에서 필드셋 정의를 읽는다.

    형식:
        {"groups": [{"name": "media-storage",
                     "fields": [{"name": "CLOUDINARY_CLOUD_NAME", "kind": "plain"}]}]}
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"필드셋 파일을 JSON 으로 읽을 수 없습니다: {path} ({e})") from e

    if not isinstance(data, dict):
        raise ValueError(f"필드셋 파일의 최상위는 객체여야 합니다: {path}")
    return field_set_from_dict(data)
