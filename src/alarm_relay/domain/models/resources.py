"""
리소스 선언 모델

선언 그래프에 등록되는 파라미터, 조건, CloudFormation 리소스를 정의합니다.
속성 값에는 문자열, 지연 값(Known/Pending), 내장 함수(Ref/GetAtt 등)를 사용할 수
있으며 합성기가 최종 템플릿 형식으로 변환합니다.

이 모듈은 외부 라이브러리에 의존하지 않습니다.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from alarm_relay.common.errors import ConfigError, ErrorCode
from alarm_relay.domain.models.construct import Construct
from alarm_relay.domain.models.values import GetAtt, Pending, Ref


class Parameter(Construct):
    """
    스택 파라미터 (배포 시점 플레이스홀더)

    값은 배포 시점에만 결정되므로 value는 항상 Pending입니다.

    Attributes:
        type: 파라미터 타입 (기본 "String")
        description: 파라미터 설명
        no_echo: 값을 출력/로그에 노출하지 않을지 여부
    """

    def __init__(
        self,
        scope: Construct,
        id: str,
        description: str | None = None,
        type: str = "String",
        no_echo: bool = False,
    ) -> None:
        super().__init__(scope, id)
        self.type = type
        self.description = description
        self.no_echo = no_echo

    @property
    def logical_id(self) -> str:
        return self.graph.allocate_logical_id(self)

    @property
    def value(self) -> Pending:
        """배포 시점에 결정되는 값"""
        return Pending(self.logical_id)

    def to_template(self) -> dict[str, Any]:
        body: dict[str, Any] = {"Type": self.type}
        if self.description:
            body["Description"] = self.description
        if self.no_echo:
            body["NoEcho"] = True
        return body


class Condition(Construct):
    """
    조건 (CloudFormation Conditions)

    expression은 Fn::Equals 같은 조건 함수 표현식입니다.
    """

    def __init__(self, scope: Construct, id: str, expression: dict[str, Any]) -> None:
        super().__init__(scope, id)
        self.expression = expression

    @property
    def logical_id(self) -> str:
        return self.graph.allocate_logical_id(self)

    @staticmethod
    def equals(left: Any, right: Any) -> dict[str, Any]:
        """Fn::Equals 표현식을 만듭니다."""
        return {"Fn::Equals": [left, right]}


class Resource(Construct):
    """
    CloudFormation 리소스 기반 클래스

    하위 클래스는 resource_type과 properties()를 정의합니다.

    Attributes:
        condition: 리소스 생성 조건 (없으면 항상 생성)
        metadata: 리소스 메타데이터
    """

    resource_type: str = ""

    def __init__(self, scope: Construct, id: str) -> None:
        super().__init__(scope, id)
        self.condition: Condition | None = None
        self.metadata: dict[str, Any] = {}

    @property
    def logical_id(self) -> str:
        return self.graph.allocate_logical_id(self)

    @property
    def ref(self) -> Ref:
        return Ref(self)

    def get_att(self, attribute: str) -> GetAtt:
        return GetAtt(self, attribute)

    def properties(self) -> dict[str, Any]:
        return {}

    def suppress(self, rule_id: str, reason: str) -> None:
        """정적 규칙 검사(cdk-nag) 예외를 메타데이터로 기록합니다."""
        rules = self.metadata.setdefault("cdk_nag", {}).setdefault("rules_to_suppress", [])
        rules.append({"id": rule_id, "reason": reason})


class QueueEncryption(str, Enum):
    """큐 암호화 방식"""

    UNENCRYPTED = "UNENCRYPTED"
    SQS_MANAGED = "SQS_MANAGED"


class QueuePolicy(Resource):
    """SQS 큐 리소스 정책"""

    resource_type = "AWS::SQS::QueuePolicy"

    def __init__(self, scope: Construct, id: str, queue: "Queue") -> None:
        super().__init__(scope, id)
        self.queue = queue
        self.statements: list[dict[str, Any]] = []

    def properties(self) -> dict[str, Any]:
        return {
            "PolicyDocument": {
                "Statement": list(self.statements),
                "Version": "2012-10-17",
            },
            "Queues": [self.queue.ref],
        }


class Queue(Resource):
    """
    SQS 큐

    enforce_ssl이면 TLS가 아닌 접근을 거부하는 정책 문장이 큐 정책에 추가됩니다.
    """

    resource_type = "AWS::SQS::Queue"

    def __init__(
        self,
        scope: Construct,
        id: str,
        encryption: QueueEncryption = QueueEncryption.SQS_MANAGED,
        enforce_ssl: bool = True,
    ) -> None:
        super().__init__(scope, id)
        self.encryption = encryption
        self.enforce_ssl = enforce_ssl
        self.policy: QueuePolicy | None = None

        if enforce_ssl:
            self.add_to_resource_policy({
                "Action": "sqs:*",
                "Condition": {"Bool": {"aws:SecureTransport": "false"}},
                "Effect": "Deny",
                "Principal": {"AWS": "*"},
                "Resource": self.queue_arn,
            })

    @property
    def queue_arn(self) -> GetAtt:
        return self.get_att("Arn")

    def add_to_resource_policy(self, statement: dict[str, Any]) -> None:
        """큐 정책에 문장을 추가합니다. 정책은 처음 호출 시 생성됩니다."""
        if self.policy is None:
            self.policy = QueuePolicy(self, "Policy", queue=self)
        self.policy.statements.append(statement)

    def properties(self) -> dict[str, Any]:
        if self.encryption is QueueEncryption.SQS_MANAGED:
            return {"SqsManagedSseEnabled": True}
        return {}


class Subscription(Resource):
    """
    SNS 구독 (토픽 → SQS 큐)

    Attributes:
        topic_arn: 구독할 토픽 ARN (문자열 또는 Pending)
        queue: 메시지를 받을 큐
        raw_message_delivery: SNS 봉투 없이 원문 전달 여부
        filter_policy: 메시지 속성 필터 정책
        filter_policy_with_message_body: 메시지 본문 필터 정책
        dead_letter_queue: 전달 실패 메시지를 보낼 큐
    """

    resource_type = "AWS::SNS::Subscription"

    def __init__(
        self,
        scope: Construct,
        id: str,
        topic_arn: Any,
        queue: Queue,
        raw_message_delivery: bool = False,
        filter_policy: dict[str, Any] | None = None,
        filter_policy_with_message_body: dict[str, Any] | None = None,
        dead_letter_queue: Queue | None = None,
    ) -> None:
        if filter_policy and filter_policy_with_message_body:
            raise ConfigError(
                ErrorCode.CONFIG_INVALID,
                "filter_policy와 filter_policy_with_message_body는 함께 사용할 수 없습니다",
                field_name="filter_policy_with_message_body",
            )
        super().__init__(scope, id)
        self.topic_arn = topic_arn
        self.queue = queue
        self.raw_message_delivery = raw_message_delivery
        self.filter_policy = filter_policy
        self.filter_policy_with_message_body = filter_policy_with_message_body
        self.dead_letter_queue = dead_letter_queue

    def properties(self) -> dict[str, Any]:
        props: dict[str, Any] = {
            "Endpoint": self.queue.queue_arn,
            "Protocol": "sqs",
            "TopicArn": self.topic_arn,
        }
        if self.raw_message_delivery:
            props["RawMessageDelivery"] = True
        if self.filter_policy:
            props["FilterPolicy"] = self.filter_policy
            props["FilterPolicyScope"] = "MessageAttributes"
        if self.filter_policy_with_message_body:
            props["FilterPolicy"] = self.filter_policy_with_message_body
            props["FilterPolicyScope"] = "MessageBody"
        if self.dead_letter_queue is not None:
            props["RedrivePolicy"] = {"deadLetterTargetArn": self.dead_letter_queue.queue_arn}
        return props


class Role(Resource):
    """IAM 역할"""

    resource_type = "AWS::IAM::Role"

    def __init__(self, scope: Construct, id: str, assumed_by: str) -> None:
        super().__init__(scope, id)
        self.assumed_by = assumed_by
        self.statements: list[dict[str, Any]] = []

    @property
    def role_arn(self) -> GetAtt:
        return self.get_att("Arn")

    def add_to_policy(self, statement: dict[str, Any]) -> None:
        self.statements.append(statement)

    def properties(self) -> dict[str, Any]:
        props: dict[str, Any] = {
            "AssumeRolePolicyDocument": {
                "Statement": [
                    {
                        "Action": "sts:AssumeRole",
                        "Effect": "Allow",
                        "Principal": {"Service": self.assumed_by},
                    }
                ],
                "Version": "2012-10-17",
            },
        }
        if self.statements:
            props["Policies"] = [
                {
                    "PolicyDocument": {
                        "Statement": list(self.statements),
                        "Version": "2012-10-17",
                    },
                    "PolicyName": "DefaultPolicy",
                }
            ]
        return props


class Connection(Resource):
    """
    EventBridge 연결 (API 대상 인증/헤더 설정)

    EventBridge는 모든 연결에 인증 방식을 요구하므로 API 키 인증만 지원합니다.
    """

    resource_type = "AWS::Events::Connection"

    def __init__(
        self,
        scope: Construct,
        id: str,
        api_key_name: str,
        api_key_value: str,
        header_parameters: dict[str, str] | None = None,
        description: str | None = None,
    ) -> None:
        super().__init__(scope, id)
        self.api_key_name = api_key_name
        self.api_key_value = api_key_value
        self.header_parameters = dict(header_parameters or {})
        self.description = description

    @property
    def connection_arn(self) -> GetAtt:
        return self.get_att("Arn")

    def properties(self) -> dict[str, Any]:
        auth: dict[str, Any] = {
            "ApiKeyAuthParameters": {
                "ApiKeyName": self.api_key_name,
                "ApiKeyValue": self.api_key_value,
            },
        }
        if self.header_parameters:
            auth["InvocationHttpParameters"] = {
                "HeaderParameters": [
                    {"Key": key, "Value": value}
                    for key, value in self.header_parameters.items()
                ],
            }
        props: dict[str, Any] = {
            "AuthParameters": auth,
            "AuthorizationType": "API_KEY",
        }
        if self.description:
            props["Description"] = self.description
        return props


class HttpMethod(str, Enum):
    """API 대상 HTTP 메서드"""

    POST = "POST"


class ApiDestination(Resource):
    """EventBridge API 대상 (HTTP(S) 엔드포인트)"""

    resource_type = "AWS::Events::ApiDestination"

    def __init__(
        self,
        scope: Construct,
        id: str,
        connection: Connection,
        endpoint: Any,
        http_method: HttpMethod = HttpMethod.POST,
        description: Any = None,
    ) -> None:
        super().__init__(scope, id)
        self.connection = connection
        self.endpoint = endpoint
        self.http_method = http_method
        self.description = description

    @property
    def api_destination_arn(self) -> GetAtt:
        return self.get_att("Arn")

    @property
    def api_destination_name(self) -> Ref:
        return self.ref

    def properties(self) -> dict[str, Any]:
        props: dict[str, Any] = {
            "ConnectionArn": self.connection.connection_arn,
            "HttpMethod": self.http_method.value,
            "InvocationEndpoint": self.endpoint,
        }
        if self.description:
            props["Description"] = self.description
        return props


class Pipe(Resource):
    """
    EventBridge 파이프 (SQS 소스 → 대상)

    Attributes:
        role: 파이프 실행 역할
        source_arn: 소스 큐 ARN
        target_arn: 대상 ARN
        input_template: 대상에 보내기 전 적용할 입력 변환
        description: 파이프 설명
    """

    resource_type = "AWS::Pipes::Pipe"

    def __init__(
        self,
        scope: Construct,
        id: str,
        role: Role,
        source_arn: Any,
        target_arn: Any,
        input_template: Any = None,
        description: Any = None,
    ) -> None:
        super().__init__(scope, id)
        self.role = role
        self.source_arn = source_arn
        self.target_arn = target_arn
        self.input_template = input_template
        self.description = description

    def properties(self) -> dict[str, Any]:
        props: dict[str, Any] = {
            "RoleArn": self.role.role_arn,
            "Source": self.source_arn,
            "Target": self.target_arn,
        }
        if self.description:
            props["Description"] = self.description
        if self.input_template is not None:
            props["TargetParameters"] = {"InputTemplate": self.input_template}
        return props


def exists_filter() -> list[dict[str, bool]]:
    """키가 존재하는 메시지만 통과시키는 필터 조건"""
    return [{"exists": True}]
