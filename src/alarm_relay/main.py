"""
AlarmRelay 진입점

컨텍스트를 로드하고 릴레이 스택을 선언한 뒤 CloudFormation 템플릿을 합성합니다.

사용 예:
    alarm-relay --context-file cdk.context.json --region us-east-1 --account 123456789012
    alarm-relay -c SourceSNSTopic=alerts -c 'GoogleChatConfig={"Space":{"Label":"Ops"}}' --output cdk.out
    alarm-relay -p GoogleChatSpaceEndpoint=https://chat.googleapis.com/... --output cdk.out
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Any, Sequence

import orjson

from alarm_relay import __version__
from alarm_relay.application.stack import DEFAULT_STACK_NAME, AlarmRelayStack
from alarm_relay.common.errors import ConfigError, ErrorCode, RelayError
from alarm_relay.common.logging import configure_logging, generate_run_id, get_logger, set_run_id
from alarm_relay.domain.models.construct import Environment
from alarm_relay.infrastructure.synth.cloudformation import synthesize, to_json, write_template
from alarm_relay.interface.config.loader import ContextLoader

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="alarm-relay",
        description="CloudWatch 알람을 Google Chat 스페이스로 전달하는 CloudFormation 템플릿 생성기",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--context-file", default=None, help="컨텍스트 파일 경로 (기본: cdk.context.json, 없으면 생략)")
    parser.add_argument(
        "-c", "--context",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="컨텍스트 재정의 (JSON 객체 값 허용, 여러 번 지정 가능)",
    )
    parser.add_argument(
        "-p", "--parameter",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="배포 파라미터 값 (파라미터 값 파일로 기록)",
    )
    parser.add_argument("--region", default=os.getenv("CDK_DEFAULT_REGION"), help="배포 리전")
    parser.add_argument("--account", default=os.getenv("CDK_DEFAULT_ACCOUNT"), help="배포 계정 ID")
    parser.add_argument("--stack-name", default=DEFAULT_STACK_NAME, help="스택 이름")
    parser.add_argument("--output", default=None, help="출력 디렉터리 (없으면 표준 출력)")
    return parser


def build_parameter_values(
    template: dict[str, Any],
    values: dict[str, Any],
) -> list[dict[str, str]]:
    """
    템플릿에 선언된 파라미터에 대해서만 파라미터 값 목록을 만듭니다.

    Raises:
        ConfigError: 템플릿에 없는 파라미터가 지정되었을 때
    """
    declared = template.get("Parameters", {})
    unknown = sorted(set(values) - set(declared))
    if unknown:
        raise ConfigError(
            ErrorCode.CONFIG_INVALID,
            f"템플릿에 선언되지 않은 파라미터입니다: {', '.join(unknown)}",
            field_name=unknown[0],
            details={"declared": sorted(declared)},
        )
    return [
        {"ParameterKey": key, "ParameterValue": str(value)}
        for key, value in values.items()
    ]


def run(argv: Sequence[str] | None = None) -> int:
    """CLI를 실행하고 종료 코드를 반환합니다."""
    args = build_parser().parse_args(argv)
    set_run_id(generate_run_id())

    try:
        loader = ContextLoader()
        overrides = loader.parse_overrides(args.context)
        context = loader.load(args.context_file, overrides)
        parameters = loader.parse_overrides(args.parameter)

        stack = AlarmRelayStack(
            args.stack_name,
            env=Environment(region=args.region, account=args.account),
            context=context,
        )
        template = synthesize(stack.graph)
        parameter_values = build_parameter_values(template, parameters) if parameters else None

        if args.output is None:
            sys.stdout.write(to_json(template).decode("utf-8") + "\n")
            if parameter_values:
                logger.warning("출력 디렉터리가 없어 파라미터 값 파일을 기록하지 않습니다")
            return 0

        outdir = Path(args.output)
        write_template(stack.graph, outdir, template)

        if parameter_values:
            parameters_path = outdir / f"{stack.graph.name}.parameters.json"
            parameters_path.write_bytes(orjson.dumps(parameter_values, option=orjson.OPT_INDENT_2))
            logger.info(
                f"파라미터 값 기록: {parameters_path}",
                path=str(parameters_path),
                keys=[p["ParameterKey"] for p in parameter_values],
            )
        return 0

    except RelayError as e:
        logger.error(f"{e.code.value}: {e.message}", error=e.to_dict())
        return e.exit_code


def main() -> None:
    """메인 진입점."""
    configure_logging()
    sys.exit(run())


if __name__ == "__main__":
    main()
