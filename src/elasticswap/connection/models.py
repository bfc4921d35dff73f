"""连接层数据模型定义模块.

提供集群连接相关的数据模型，包括：
- ClusterRole: 集群角色枚举（关键 / 可丢弃）
- ClusterConfig: 单个集群配置
- ConnectionConfig: 连接池配置
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..policies import DEFAULT_POLICY, VersionPolicy, get_policy
from .exceptions import ClusterNotFoundError, ConnectionConfigError


class ClusterRole(Enum):
    """集群角色枚举.

    用于标识集群在多集群扇出写入中的重要程度。

    Attributes:
        CRITICAL: 关键集群，操作失败会中断调用并向上抛出
        DISPENSABLE: 可丢弃集群，操作失败只记录日志并通知，不影响调用
    """

    CRITICAL = "critical"
    DISPENSABLE = "dispensable"


@dataclass
class ClusterConfig:
    """集群配置模型.

    定义单个 ES 集群的连接信息、角色、版本策略和认证方式。

    Attributes:
        host: ES 节点主机名（必需，不可为空）
        port: ES 端口，默认 9200
        scheme: 协议，默认 http
        role: 集群角色，默认 CRITICAL
        name: 集群名称，默认为 "host:port"
        policy: 版本策略名称或实例，默认 "8.x"
        username: Basic Auth 用户名
        password: Basic Auth 密码
        api_key: API Key 认证（字符串或元组）
        bearer_token: Bearer Token 认证
        ca_certs: CA 证书文件路径
        verify_certs: 是否验证 SSL 证书，默认 True

    Raises:
        ConnectionConfigError: 当 host 为空或端口不合法时抛出

    Examples:
        >>> config = ClusterConfig(
        ...     host="es-primary",
        ...     role=ClusterRole.CRITICAL,
        ...     policy="8.x",
        ... )
    """

    host: str = ""
    port: int = 9200
    scheme: str = "http"
    role: ClusterRole = ClusterRole.CRITICAL
    name: str = ""
    policy: str | VersionPolicy = DEFAULT_POLICY
    username: str | None = None
    password: str | None = None
    api_key: str | tuple[str, str] | None = None
    bearer_token: str | None = None
    ca_certs: str | None = None
    verify_certs: bool = True

    def __post_init__(self) -> None:
        """校验集群配置参数合法性."""
        if not self.host:
            raise ConnectionConfigError("host 不能为空，请提供 ES 节点主机名")
        if not 0 < self.port < 65536:
            raise ConnectionConfigError(f"port 不合法，当前值: {self.port}")
        if isinstance(self.role, str):
            self.role = ClusterRole(self.role)
        if not self.name:
            self.name = self.address
        # 尽早失败：策略名称写错时在加载配置阶段就报错
        get_policy(self.policy)

    @property
    def address(self) -> str:
        """集群地址 "host:port"，用于日志与错误定位."""
        return f"{self.host}:{self.port}"

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    @property
    def version_policy(self) -> VersionPolicy:
        return get_policy(self.policy)


@dataclass
class ConnectionConfig:
    """连接池配置模型.

    定义 ES 客户端的超时与重试策略。重试由客户端在传输层完成，
    超过次数后以 TransportFailureError 抛出。

    Attributes:
        request_timeout: 请求超时时间（秒），默认 10，必须 >= 0
        max_retries: 传输层失败最大重试次数，默认 1
        retry_on_timeout: 超时是否重试，默认 True
        http_compress: 是否启用 HTTP 压缩，默认 False
        log_responses: 是否以 info 级别记录写入类原始响应，默认 False

    Raises:
        ConnectionConfigError: 当参数不合法时抛出

    Examples:
        >>> config = ConnectionConfig(request_timeout=30, max_retries=3)
    """

    request_timeout: int = 10
    max_retries: int = 1
    retry_on_timeout: bool = True
    http_compress: bool = False
    log_responses: bool = False

    def __post_init__(self) -> None:
        """校验连接池配置参数合法性."""
        if self.request_timeout < 0:
            raise ConnectionConfigError(
                f"request_timeout 必须 >= 0，当前值: {self.request_timeout}"
            )
        if self.max_retries < 0:
            raise ConnectionConfigError(
                f"max_retries 必须 >= 0，当前值: {self.max_retries}"
            )


def validate_clusters(clusters: list[ClusterConfig]) -> list[ClusterConfig]:
    """校验集群列表：至少包含一个关键集群，名称不可重复.

    Raises:
        ConnectionConfigError: 校验失败时抛出
    """
    if not clusters:
        raise ConnectionConfigError("clusters 不能为空，请提供至少一个集群配置")
    names = [cluster.name for cluster in clusters]
    duplicated = sorted({name for name in names if names.count(name) > 1})
    if duplicated:
        raise ConnectionConfigError(f"集群名称重复: {duplicated}")
    if not any(cluster.role == ClusterRole.CRITICAL for cluster in clusters):
        raise ConnectionConfigError("至少需要配置一个关键（critical）集群")
    return clusters


def load_clusters(config: Mapping[str, Any]) -> list[ClusterConfig]:
    """从配置字典加载集群列表.

    配置格式::

        {
            "clusters": {
                "primary": {"host": "es-1", "port": 9200, "policy": "8.x"},
                "backup": {"host": "es-2"},
            },
            "critical_clusters": ["primary"],
            "dispensable_clusters": ["backup"],
        }

    关键集群按 critical_clusters 中的顺序排列，这个顺序决定扇出时的调用顺序。

    Args:
        config: 配置字典

    Returns:
        带有角色信息的集群配置列表

    Raises:
        ClusterNotFoundError: 引用了未定义的集群时抛出
        ConnectionConfigError: 同一集群同时属于两种角色或缺少关键集群时抛出
    """
    definitions = config.get("clusters", {})
    critical = list(config.get("critical_clusters", []))
    dispensable = list(config.get("dispensable_clusters", []))

    overlap = sorted(set(critical) & set(dispensable))
    if overlap:
        raise ConnectionConfigError(f"集群不能同时为关键和可丢弃集群: {overlap}")

    clusters: list[ClusterConfig] = []
    for role, names in (
        (ClusterRole.CRITICAL, critical),
        (ClusterRole.DISPENSABLE, dispensable),
    ):
        for name in names:
            if name not in definitions:
                raise ClusterNotFoundError(f"未找到名称为 '{name}' 的集群配置")
            options = dict(definitions[name])
            options.pop("role", None)
            options.setdefault("name", name)
            clusters.append(ClusterConfig(role=role, **options))

    return validate_clusters(clusters)
