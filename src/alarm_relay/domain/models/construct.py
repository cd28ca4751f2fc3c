"""
선언 그래프 모델

스택(선언 그래프)과 그 안의 구성 트리를 정의합니다.
그래프는 컨텍스트 저장소, 배포 환경, 논리 ID 할당, 그리고 그래프 범위 캐시
(토픽 참조 캐시)를 소유합니다. 모듈 전역 상태를 두지 않으므로 한 프로세스에서
여러 그래프를 독립적으로 구성할 수 있습니다.

이 모듈은 외부 라이브러리에 의존하지 않습니다.
"""

from __future__ import annotations

import copy
import re
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator

from alarm_relay.common.errors import ConstructError, ErrorCode
from alarm_relay.common.hashing import short_id
from alarm_relay.domain.models.values import Aws, Pending

if TYPE_CHECKING:
    from alarm_relay.domain.models.reference import ImportedTopic


# CloudFormation 논리 ID 최대 길이
MAX_LOGICAL_ID_LENGTH = 255

# 논리 ID에서 제외되는 경로 구성 요소
_HIDDEN_PATH_COMPONENTS = frozenset({"Default", "Resource"})

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


class Node:
    """
    구성 트리 노드

    구성의 ID, 부모 스코프, 자식 목록을 관리합니다.
    """

    def __init__(self, host: "Construct", scope: "Construct | None", id: str) -> None:
        if not id and scope is not None:
            raise ConstructError(
                ErrorCode.DUPLICATE_CONSTRUCT,
                "구성 ID는 비워둘 수 없습니다",
                path=scope.node.path,
            )
        self.host = host
        self.scope = scope
        # 경로 구분자는 ID에 사용할 수 없습니다
        self.id = id.replace("/", "--")
        self._children: dict[str, Construct] = {}

    @property
    def path_components(self) -> list[str]:
        """루트(그래프)를 제외한 경로 구성 요소"""
        components: list[str] = []
        node: Node | None = self
        while node is not None and node.scope is not None:
            components.append(node.id)
            node = node.scope.node
        return list(reversed(components))

    @property
    def path(self) -> str:
        """루트를 포함한 전체 경로"""
        return "/".join([self.root.node.id, *self.path_components]) if self.scope else self.id

    @property
    def root(self) -> "Construct":
        """트리의 루트 구성"""
        node = self
        while node.scope is not None:
            node = node.scope.node
        return node.host

    @property
    def children(self) -> list["Construct"]:
        """등록 순서대로 정렬된 자식 목록"""
        return list(self._children.values())

    def try_find_child(self, id: str) -> "Construct | None":
        """ID로 자식을 찾습니다. 없으면 None"""
        return self._children.get(id)

    def add_child(self, child: "Construct") -> None:
        """
        자식을 등록합니다.

        Raises:
            ConstructError: 같은 ID의 자식이 이미 있을 때
        """
        if child.node.id in self._children:
            raise ConstructError(
                ErrorCode.DUPLICATE_CONSTRUCT,
                f"같은 스코프에 이미 존재하는 ID입니다: {child.node.id}",
                path=self.path,
                details={"id": child.node.id},
            )
        self._children[child.node.id] = child

    def find_all(self) -> Iterator["Construct"]:
        """자신과 모든 하위 구성을 전위 순회로 반환합니다."""
        yield self.host
        for child in self._children.values():
            yield from child.node.find_all()


class Construct:
    """
    구성 기본 클래스

    모든 선언(파라미터, 조건, 리소스, 파이프라인)은 스코프 아래에 ID로 등록됩니다.
    """

    def __init__(self, scope: "Construct | None", id: str) -> None:
        self.node = Node(self, scope, id)
        if scope is not None:
            with scope.graph.lock:
                scope.node.add_child(self)

    @property
    def graph(self) -> "DeclarationGraph":
        """이 구성이 속한 선언 그래프"""
        root = self.node.root
        if not isinstance(root, DeclarationGraph):
            raise ConstructError(
                ErrorCode.INTERNAL_ERROR,
                "구성 트리의 루트가 선언 그래프가 아닙니다",
                path=self.node.path,
            )
        return root

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path={self.node.path!r})"


@dataclass(frozen=True)
class Environment:
    """
    배포 환경

    region/account가 None이면 배포 시점의 의사 파라미터를 사용합니다.

    Attributes:
        region: 리전 (예: "us-east-1")
        account: 12자리 계정 ID
    """

    region: str | None = None
    account: str | None = None

    @property
    def is_agnostic(self) -> bool:
        """리전/계정이 지정되지 않았는지 여부"""
        return self.region is None or self.account is None


class DeclarationGraph(Construct):
    """
    선언 그래프 (스택)

    한 번의 선언 패스가 만드는 모든 구성의 루트입니다.

    주요 기능:
    - 컨텍스트 저장소 조회 (try_get_context)
    - 배포 환경 (region/account)
    - 논리 ID 할당
    - 그래프 범위 캐시 (토픽 참조 캐시) 및 캐시 보호용 락

    Example:
        >>> graph = DeclarationGraph(
        ...     "AlertsStack",
        ...     env=Environment(region="us-east-1", account="123456789012"),
        ...     context={"SourceSNSTopic": "alerts"},
        ... )
        >>> graph.try_get_context("SourceSNSTopic")
        'alerts'
    """

    def __init__(
        self,
        name: str,
        env: Environment | None = None,
        context: dict[str, Any] | None = None,
        description: str | None = None,
    ) -> None:
        # 부모 생성자가 graph.lock을 참조하지 않도록 루트는 scope=None으로 생성합니다
        self.lock = threading.RLock()
        super().__init__(None, name)
        self.env = env or Environment()
        self.description = description
        self.metadata: dict[str, Any] = {}
        self._context: dict[str, Any] = dict(context or {})

        # 정규 ARN → 토픽 참조
        self.topic_cache: dict[str, "ImportedTopic"] = {}

    @property
    def name(self) -> str:
        """스택 이름"""
        return self.node.id

    @property
    def region(self) -> str | Pending:
        """리전 (지정되지 않았으면 AWS::Region)"""
        return self.env.region if self.env.region else Aws.REGION

    @property
    def account(self) -> str | Pending:
        """계정 ID (지정되지 않았으면 AWS::AccountId)"""
        return self.env.account if self.env.account else Aws.ACCOUNT_ID

    @property
    def context(self) -> dict[str, Any]:
        """컨텍스트 저장소 사본"""
        return copy.deepcopy(self._context)

    def try_get_context(self, key: str) -> Any:
        """
        컨텍스트 값을 반환합니다.

        반환값은 사본이므로 호출자가 수정해도 저장소는 바뀌지 않습니다.
        """
        return copy.deepcopy(self._context.get(key))

    def add_metadata(self, key: str, value: Any) -> None:
        """템플릿 메타데이터를 추가합니다."""
        self.metadata[key] = value

    def allocate_logical_id(self, construct: Construct) -> str:
        """
        구성의 논리 ID를 할당합니다.

        - 최상위 구성은 자신의 ID를 그대로 사용합니다 (영숫자만 유지).
        - 하위 구성은 경로 구성 요소를 이어 붙이고 경로 해시 8자리를 덧붙입니다.
        - 최대 길이를 넘는 이름은 짧은 식별자로 대체하거나 잘라냅니다.
        """
        components = construct.node.path_components
        if not components:
            raise ConstructError(
                ErrorCode.INTERNAL_ERROR,
                "그래프 루트에는 논리 ID가 없습니다",
                path=construct.node.path,
            )

        if len(components) == 1:
            human = _NON_ALNUM.sub("", components[0])
            if not human or len(human) > MAX_LOGICAL_ID_LENGTH:
                return short_id(components[0], 4)
            return human

        human = "".join(
            _NON_ALNUM.sub("", c) for c in components if c not in _HIDDEN_PATH_COMPONENTS
        )
        suffix = short_id("/".join(components), 4)
        return human[: MAX_LOGICAL_ID_LENGTH - len(suffix)] + suffix

    def find_all(self) -> list[Construct]:
        """그래프의 모든 구성을 등록 순서대로 반환합니다 (루트 제외)."""
        return [c for c in self.node.find_all() if c is not self]
