"""
catalog
-------

정적 사이트(프론트엔드 Firebase Auth) + 서버리스 함수(Firebase Admin) +
Cloudinary 미디어 스토리지 배포에 필요한 기본 필드셋.
"""

from __future__ import annotations

from typing import List

from .fields import ConfigField, FieldGroup, FieldKind, FieldSet


def default_field_set() -> FieldSet:
    return FieldSet(
        (
            FieldGroup(
                "frontend-auth",
                (
                    ConfigField("FIREBASE_API_KEY", description="Firebase 웹 API 키"),
                    ConfigField("FIREBASE_AUTH_DOMAIN", description="예: <project>.firebaseapp.com"),
                    ConfigField("FIREBASE_PROJECT_ID"),
                    ConfigField("FIREBASE_STORAGE_BUCKET"),
                    ConfigField("FIREBASE_MESSAGING_SENDER_ID"),
                    ConfigField("FIREBASE_APP_ID"),
                ),
            ),
            FieldGroup(
                "backend-auth",
                (
                    ConfigField("FIREBASE_CLIENT_EMAIL", description="서비스 계정 이메일"),
                    ConfigField(
                        "FIREBASE_PRIVATE_BASE_64_KEY",
                        FieldKind.BASE64_PEM_KEY,
                        description="서비스 계정 개인키(PEM) 를 base64 로 인코딩한 값",
                        fallback=ConfigField(
                            "FIREBASE_PRIVATE_KEY",
                            FieldKind.PEM_KEY,
                            description="레거시 형식: 줄바꿈을 \\n 으로 이스케이프한 PEM",
                        ),
                    ),
                ),
            ),
            FieldGroup(
                "media-storage",
                (
                    ConfigField("CLOUDINARY_CLOUD_NAME"),
                    ConfigField("CLOUDINARY_UPLOAD_PRESET"),
                    ConfigField("CLOUDINARY_API_KEY", required=False, description="정리 작업용"),
                    ConfigField("CLOUDINARY_API_SECRET", required=False, description="정리 작업용"),
                ),
            ),
            FieldGroup(
                "error-monitoring",
                (ConfigField("SENTRY_DSN", FieldKind.URL_STRING, required=False),),
            ),
            FieldGroup(
                "runtime",
                (
                    ConfigField(
                        "NODE_ENV",
                        FieldKind.ENUM,
                        required=False,
                        allowed=("production", "development", "test"),
                    ),
                ),
            ),
        )
    )


def _describe(cfg_field: ConfigField) -> str:
    parts = [cfg_field.kind.value, "required" if cfg_field.required else "optional"]
    if cfg_field.allowed:
        parts.append("one of: " + "|".join(cfg_field.allowed))
    text = ", ".join(parts)
    if cfg_field.description:
        text += f" - {cfg_field.description}"
    return text


def render_env_template(field_set: FieldSet) -> str:
    """
    필드셋으로부터 값이 비어 있는 .env 템플릿을 만든다.
    fallback 변수는 주석 처리된 줄로 함께 안내한다.
    """
    lines: List[str] = []
    lines.append("# provision-kit 환경변수 템플릿")
    lines.append("# 실제 값은 배포 플랫폼의 환경변수 저장소에 넣고, 이 파일은 커밋하지 마세요.")
    for group in field_set.groups:
        lines.append("")
        lines.append(f"## {group.name}")
        for f in group.fields:
            lines.append(f"# {_describe(f)}")
            lines.append(f"{f.name}=")
            fb = f.fallback
            while fb is not None:
                lines.append(f"# fallback ({_describe(fb)})")
                lines.append(f"# {fb.name}=")
                fb = fb.fallback
    return "\n".join(lines) + "\n"


def plan_summary(field_set: FieldSet) -> str:
    """값은 보지 않고, 점검 대상 필드 목록만 요약한다."""
    lines: List[str] = []
    lines.append("# Provision plan")
    lines.append(f"- groups: {len(field_set.groups)}")
    lines.append(f"- fields: {len(field_set)}")
    for group in field_set.groups:
        lines.append("")
        lines.append(f"## {group.name}")
        for f in group.fields:
            line = f"- {f.name}: {f.kind.value} ({'required' if f.required else 'optional'})"
            if f.fallback is not None:
                line += " fallback=" + ",".join(f.names()[1:])
            lines.append(line)
    return "\n".join(lines)
