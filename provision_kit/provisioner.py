"""
provisioner
-----------

FieldSet 과 환경변수 스냅샷(mapping)을 받아 필드별 존재/형식 여부를 점검하고
Report 를 만든다. os.environ 을 직접 읽지 않으며, 네트워크/파일 I/O 도 없다.

누락/형식 오류는 예외가 아니라 Report 에 모이는 정상적인 결과다.
Report 와 요약 텍스트에는 실제 값이 절대 포함되지 않는다.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Tuple

from .fields import ConfigField, FieldSet
from .logging_utils import get_logger
from .validators import check_value


logger = get_logger(__name__)


class FieldStatus(str, Enum):
    PRESENT = "Present"
    MISSING = "Missing"
    MALFORMED = "MalformedValue"


class ReportStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"


_STATUS_SYMBOLS = {
    FieldStatus.PRESENT: "[x]",
    FieldStatus.MISSING: "[ ]",
    FieldStatus.MALFORMED: "[!]",
}


@dataclass(frozen=True)
class ValidationResult:
    field: str
    group: str
    status: FieldStatus
    required: bool = True
    # 값을 공급한 환경변수 이름 (fallback 으로 채워졌다면 그 이름)
    source: Optional[str] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is FieldStatus.PRESENT


@dataclass(frozen=True)
class Report:
    results: Tuple[ValidationResult, ...] = ()

    @property
    def overall(self) -> ReportStatus:
        for r in self.results:
            if r.required and not r.ok:
                return ReportStatus.FAIL
        return ReportStatus.PASS

    @property
    def passed(self) -> bool:
        return self.overall is ReportStatus.PASS

    @property
    def missing(self) -> List[ValidationResult]:
        return [r for r in self.results if r.required and r.status is FieldStatus.MISSING]

    @property
    def malformed(self) -> List[ValidationResult]:
        return [r for r in self.results if r.required and r.status is FieldStatus.MALFORMED]

    @property
    def warnings(self) -> List[ValidationResult]:
        """선택 필드인데 값이 있으나 형식이 잘못된 경우. 전체 결과를 실패시키지는 않는다."""
        return [r for r in self.results if not r.required and r.status is FieldStatus.MALFORMED]

    def results_for(self, group: str) -> List[ValidationResult]:
        return [r for r in self.results if r.group == group]

    def group_names(self) -> List[str]:
        names: List[str] = []
        for r in self.results:
            if r.group not in names:
                names.append(r.group)
        return names


def _validate_field(group: str, cfg_field: ConfigField, environment: Mapping[str, str]) -> ValidationResult:
    candidate: Optional[ConfigField] = cfg_field
    # 빈 값이 들어 있던 첫 후보. 이후 후보가 모두 없으면 이 값으로 판정한다.
    blank: Optional[ConfigField] = None
    while candidate is not None:
        raw = environment.get(candidate.name)
        if raw is not None and not raw.strip() and candidate.fallback is not None:
            # 배포 함수들은 빈 값을 "없음" 으로 보고 fallback 변수를 읽는다.
            if blank is None:
                blank = candidate
            candidate = candidate.fallback
            continue
        if raw is not None:
            ok, reason = check_value(raw, candidate)
            return ValidationResult(
                field=cfg_field.name,
                group=group,
                status=FieldStatus.PRESENT if ok else FieldStatus.MALFORMED,
                required=cfg_field.required,
                source=candidate.name,
                reason=reason,
            )
        candidate = candidate.fallback

    if blank is not None:
        _, reason = check_value(environment[blank.name], blank)
        return ValidationResult(
            field=cfg_field.name,
            group=group,
            status=FieldStatus.MALFORMED,
            required=cfg_field.required,
            source=blank.name,
            reason=reason,
        )

    return ValidationResult(
        field=cfg_field.name,
        group=group,
        status=FieldStatus.MISSING,
        required=cfg_field.required,
    )


def validate(field_set: FieldSet, environment: Mapping[str, str]) -> Report:
    """
    필드셋의 모든 필드를 순서대로 점검한다. 필드마다 정확히 하나의 결과를 만든다.
    """
    results: List[ValidationResult] = []
    for group, cfg_field in field_set:
        result = _validate_field(group.name, cfg_field, environment)
        logger.debug("필드 점검: %s/%s -> %s", group.name, result.field, result.status.value)
        results.append(result)

    report = Report(tuple(results))
    logger.info(
        "환경변수 점검 완료: %s (필드 %d개, 누락 %d, 형식 오류 %d)",
        report.overall.value,
        len(results),
        len(report.missing),
        len(report.malformed),
    )
    return report


def _result_line(r: ValidationResult) -> str:
    line = f"- {_STATUS_SYMBOLS[r.status]} {r.field}: {r.status.value}"
    if not r.required:
        line += " (optional)"
    if r.source and r.source != r.field:
        line += f" (via {r.source})"
    if r.reason:
        line += f" - {r.reason}"
    return line


def redacted_summary(report: Report) -> str:
    """
    그룹별 체크리스트 형태의 요약을 만든다.
    필드 이름과 상태 기호만 출력하며, 어떤 경우에도 값은 포함하지 않는다.
    """
    lines: List[str] = []
    required_count = sum(1 for r in report.results if r.required)
    lines.append("# Deploy config check")
    lines.append(f"- fields: {len(report.results)} (required {required_count})")
    lines.append("")

    for group in report.group_names():
        lines.append(f"## {group}")
        for r in report.results_for(group):
            lines.append(_result_line(r))
        lines.append("")

    lines.append("## Summary")
    lines.append(f"- 상태: {report.overall.value}")

    if report.missing:
        lines.append("")
        lines.append("### Missing required fields")
        for r in report.missing:
            lines.append(f"- {r.field}")

    if report.malformed:
        lines.append("")
        lines.append("### Malformed required fields")
        for r in report.malformed:
            lines.append(f"- {r.field}")

    if report.warnings:
        lines.append("")
        lines.append("### Warnings (선택 필드 형식 오류)")
        for r in report.warnings:
            lines.append(f"- {r.field}")

    return "\n".join(lines)
