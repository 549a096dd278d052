import os
import sys
from typing import Optional, Tuple

import click

from .catalog import default_field_set, plan_summary, render_env_template
from .config import ProvisionConfig, load_environment_snapshot
from .fields import FieldSet, load_field_set_file
from .logging_utils import get_logger, install_secret_filter, setup_logging
from .provisioner import redacted_summary, validate


logger = get_logger(__name__)

EXIT_FAIL = 1
EXIT_USAGE = 2

TEMPLATE_NAME = ".env.provision.example"


@click.group()
@click.option(
    "-C",
    "--chdir",
    "chdir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=".",
    help="작업 디렉토리 (기본: 현재 디렉토리)",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="로그 레벨을 DEBUG로 올립니다.",
)
@click.pass_context
def main(ctx: click.Context, chdir: str, verbose: int) -> None:
    """배포 전 환경변수/시크릿 점검 CLI (값은 절대 출력하지 않음)"""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["chdir"] = chdir
    ctx.obj["verbose"] = verbose


def _load_tool_config() -> ProvisionConfig:
    try:
        return ProvisionConfig.from_env()
    except ValueError as e:
        logger.debug("PROVISION_* 설정 로드 실패", exc_info=True)
        click.echo(f"[ERROR] 설정 로드 실패: {e}", err=True)
        sys.exit(EXIT_USAGE)


def _load_field_set(base_dir: str, fieldset_path: Optional[str]) -> FieldSet:
    """
    필드셋 정의를 로드한다. 정의 오류(중복 이름 등)는 도구 자체의 설정 오류이므로
    여기서 바로 종료한다.
    """
    if not fieldset_path:
        return default_field_set()

    path = fieldset_path if os.path.isabs(fieldset_path) else os.path.join(base_dir, fieldset_path)
    try:
        return load_field_set_file(path)
    except (OSError, ValueError) as e:
        logger.debug("필드셋 정의 로드 실패: %s", path, exc_info=True)
        click.echo(f"[ERROR] 필드셋 정의 로드 실패: {e}", err=True)
        sys.exit(EXIT_USAGE)


@main.command()
@click.option(
    "--env-file",
    "env_files",
    multiple=True,
    help="읽을 .env 파일 (여러 번 지정 가능, 뒤에 올수록 우선). 기본: PROVISION_ENV_FILES 또는 .env,.env.secrets",
)
@click.option("--fieldset", "fieldset_path", type=str, default=None, help="필드셋 정의 JSON 파일")
@click.option(
    "--group",
    "groups",
    type=str,
    default="",
    help="쉼표로 구분된 그룹 이름만 점검합니다. (예: backend-auth,media-storage)",
)
@click.option(
    "--no-process-env",
    "no_process_env",
    is_flag=True,
    help="프로세스 환경변수는 무시하고 .env 파일만 사용합니다.",
)
@click.pass_context
def check(
    ctx: click.Context,
    env_files: Tuple[str, ...],
    fieldset_path: Optional[str],
    groups: str,
    no_process_env: bool,
) -> None:
    """
    필수 환경변수의 존재/형식을 점검하고 체크리스트를 출력한다.
    PASS 이면 exit 0, 아니면 exit 1 로 종료하여 CI 에서 감지할 수 있게 한다.
    """
    base_dir: str = ctx.obj["chdir"]
    cfg = _load_tool_config()

    field_set = _load_field_set(base_dir, fieldset_path or cfg.fieldset_file)

    if groups.strip():
        group_list = [p.strip() for p in groups.split(",") if p.strip()]
        try:
            field_set = field_set.select(group_list)
        except ValueError as e:
            click.echo(f"[ERROR] {e}", err=True)
            sys.exit(EXIT_USAGE)

    environment = load_environment_snapshot(
        base_dir,
        files=list(env_files) if env_files else cfg.env_files,
        include_process_env=cfg.include_process_env and not no_process_env,
    )

    # 점검 대상 필드의 값만 redaction 대상으로 등록한다.
    secret_values = []
    for _, f in field_set:
        for name in f.names():
            if name in environment:
                secret_values.append(environment[name])
    install_secret_filter(secret_values, min_length=cfg.redact_min_length)

    report = validate(field_set, environment)
    click.echo(redacted_summary(report))

    if not report.passed:
        sys.exit(EXIT_FAIL)


@main.command()
@click.option("--fieldset", "fieldset_path", type=str, default=None, help="필드셋 정의 JSON 파일")
@click.pass_context
def plan(ctx: click.Context, fieldset_path: Optional[str]) -> None:
    """점검 대상 그룹/필드/종류를 출력 (값은 읽지 않음)"""
    base_dir: str = ctx.obj["chdir"]
    cfg = _load_tool_config()
    field_set = _load_field_set(base_dir, fieldset_path or cfg.fieldset_file)
    click.echo(plan_summary(field_set))


@main.command()
@click.option("--fieldset", "fieldset_path", type=str, default=None, help="필드셋 정의 JSON 파일")
@click.option("--force", is_flag=True, help="이미 존재하는 템플릿을 덮어씁니다.")
@click.pass_context
def init(ctx: click.Context, fieldset_path: Optional[str], force: bool) -> None:
    """
    현재 디렉토리에 값이 비어 있는 env 템플릿(.env.provision.example)을 생성한다.
    """
    base_dir: str = ctx.obj["chdir"]
    cfg = _load_tool_config()
    field_set = _load_field_set(base_dir, fieldset_path or cfg.fieldset_file)

    target = os.path.join(base_dir, TEMPLATE_NAME)
    if os.path.exists(target) and not force:
        click.echo(f"{TEMPLATE_NAME} 이(가) 이미 존재하여 건너뜀")
        return

    with open(target, "w", encoding="utf-8") as dst:
        dst.write(render_env_template(field_set))
    click.echo(f"{TEMPLATE_NAME} 템플릿을 생성했습니다.")
