import base64

from provision_kit.catalog import default_field_set
from provision_kit.fields import ConfigField, FieldGroup, FieldKind, FieldSet
from provision_kit.provisioner import (
    FieldStatus,
    ReportStatus,
    redacted_summary,
    validate,
)


def _single(name: str, kind: FieldKind = FieldKind.PLAIN_STRING, **kwargs) -> FieldSet:
    return FieldSet((FieldGroup("media-storage", (ConfigField(name, kind, **kwargs),)),))


def test_present_plain_string_passes() -> None:
    report = validate(_single("CLOUD_NAME"), {"CLOUD_NAME": "dkm3avvjl"})

    assert report.overall is ReportStatus.PASS
    assert len(report.results) == 1
    assert report.results[0].field == "CLOUD_NAME"
    assert report.results[0].status is FieldStatus.PRESENT


def test_missing_required_field_fails() -> None:
    report = validate(_single("APP_ID"), {})

    assert report.overall is ReportStatus.FAIL
    assert report.results[0].status is FieldStatus.MISSING
    assert [r.field for r in report.missing] == ["APP_ID"]


def test_default_field_set_passes_with_full_env(full_env: dict[str, str]) -> None:
    fs = default_field_set()

    report = validate(fs, full_env)

    assert report.overall is ReportStatus.PASS
    assert len(report.results) == len(fs)
    # 선택 필드는 없어도 실패하지 않는다.
    optional = [r for r in report.results if not r.required]
    assert optional and all(r.status is FieldStatus.MISSING for r in optional)


def test_one_missing_required_field_fails_default_set(full_env: dict[str, str]) -> None:
    env = dict(full_env)
    del env["FIREBASE_APP_ID"]

    report = validate(default_field_set(), env)

    assert report.overall is ReportStatus.FAIL
    assert [r.field for r in report.missing] == ["FIREBASE_APP_ID"]


def test_base64_without_markers_is_malformed(full_env: dict[str, str]) -> None:
    env = dict(full_env)
    env["FIREBASE_PRIVATE_BASE_64_KEY"] = base64.b64encode(b"hello world").decode("ascii")

    report = validate(default_field_set(), env)
    key = [r for r in report.results if r.field == "FIREBASE_PRIVATE_BASE_64_KEY"][0]

    assert key.status is FieldStatus.MALFORMED
    assert report.overall is ReportStatus.FAIL


def test_legacy_private_key_fallback(full_env: dict[str, str], pem_text: str) -> None:
    env = dict(full_env)
    del env["FIREBASE_PRIVATE_BASE_64_KEY"]
    env["FIREBASE_PRIVATE_KEY"] = pem_text.replace("\n", "\\n")

    report = validate(default_field_set(), env)
    key = [r for r in report.results if r.field == "FIREBASE_PRIVATE_BASE_64_KEY"][0]

    assert key.status is FieldStatus.PRESENT
    assert key.source == "FIREBASE_PRIVATE_KEY"
    assert report.passed


def test_primary_value_wins_over_fallback(full_env: dict[str, str]) -> None:
    env = dict(full_env)
    env["FIREBASE_PRIVATE_KEY"] = "garbage"

    report = validate(default_field_set(), env)
    key = [r for r in report.results if r.field == "FIREBASE_PRIVATE_BASE_64_KEY"][0]

    assert key.source == "FIREBASE_PRIVATE_BASE_64_KEY"
    assert key.status is FieldStatus.PRESENT


def test_optional_malformed_is_warning_only(full_env: dict[str, str]) -> None:
    env = dict(full_env)
    env["NODE_ENV"] = "staging"

    report = validate(default_field_set(), env)

    assert report.passed
    assert [r.field for r in report.warnings] == ["NODE_ENV"]


def test_empty_value_is_malformed_not_missing() -> None:
    report = validate(_single("APP_ID"), {"APP_ID": "   "})

    assert report.results[0].status is FieldStatus.MALFORMED
    assert report.overall is ReportStatus.FAIL


def test_validate_is_idempotent(full_env: dict[str, str]) -> None:
    fs = default_field_set()
    env = dict(full_env)
    env["SENTRY_DSN"] = "not a url"

    assert validate(fs, env) == validate(fs, env)


def test_validate_does_not_mutate_environment(full_env: dict[str, str]) -> None:
    env = dict(full_env)

    validate(default_field_set(), env)

    assert env == full_env


def test_summary_never_contains_values(full_env: dict[str, str], pem_text: str) -> None:
    env = dict(full_env)
    env["NODE_ENV"] = "production"
    env["SENTRY_DSN"] = "https://93d779626b30e8101d@o4507568980172800.ingest.sentry.io/45"
    env["CLOUDINARY_API_SECRET"] = "s3cr3t-value-xyz"
    env["FIREBASE_PRIVATE_KEY"] = pem_text

    text = redacted_summary(validate(default_field_set(), env))

    for value in env.values():
        if len(value) > 4:
            assert value not in text
    assert "PRIVATE KEY" not in text


def test_summary_lists_groups_and_status_symbols(full_env: dict[str, str]) -> None:
    env = dict(full_env)
    del env["CLOUDINARY_UPLOAD_PRESET"]
    env["SENTRY_DSN"] = "nope"

    text = redacted_summary(validate(default_field_set(), env))

    assert "## frontend-auth" in text
    assert "## media-storage" in text
    assert "- [x] CLOUDINARY_CLOUD_NAME: Present" in text
    assert "- [ ] CLOUDINARY_UPLOAD_PRESET: Missing" in text
    assert "- [!] SENTRY_DSN: MalformedValue (optional)" in text
    assert "상태: FAIL" in text
    assert "### Missing required fields" in text


def test_blank_primary_key_falls_back_to_legacy_key(full_env: dict[str, str], pem_text: str) -> None:
    env = dict(full_env)
    env["FIREBASE_PRIVATE_BASE_64_KEY"] = ""
    env["FIREBASE_PRIVATE_KEY"] = pem_text.replace("\n", "\\n")

    report = validate(default_field_set(), env)
    key = [r for r in report.results if r.field == "FIREBASE_PRIVATE_BASE_64_KEY"][0]

    assert key.status is FieldStatus.PRESENT
    assert key.source == "FIREBASE_PRIVATE_KEY"
    assert report.passed


def test_blank_primary_key_without_legacy_key_is_malformed(full_env: dict[str, str]) -> None:
    env = dict(full_env)
    env["FIREBASE_PRIVATE_BASE_64_KEY"] = "  "

    report = validate(default_field_set(), env)
    key = [r for r in report.results if r.field == "FIREBASE_PRIVATE_BASE_64_KEY"][0]

    assert key.status is FieldStatus.MALFORMED
    assert key.source == "FIREBASE_PRIVATE_BASE_64_KEY"
    assert report.overall is ReportStatus.FAIL
