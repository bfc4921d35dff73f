"""ES 连接模块 - 统一管理集群配置与 Elasticsearch 客户端连接池.

主要组件:
    - ConnectionPool: 按 (host, port) 复用客户端的连接池
    - ClusterConfig: 集群配置模型
    - ConnectionConfig: 连接池配置模型
    - ClusterRole: 集群角色枚举（关键 / 可丢弃）
    - load_clusters: 从配置字典加载集群列表

使用示例:
    from elasticswap.connection import ConnectionPool, load_clusters

    clusters = load_clusters(settings["elasticsearch"])
    pool = ConnectionPool()
"""

from .exceptions import (
    ClusterNotFoundError,
    ConnectionConfigError,
    ConnectionPoolError,
)
from .models import (
    ClusterConfig,
    ClusterRole,
    ConnectionConfig,
    load_clusters,
    validate_clusters,
)
from .tool import ConnectionPool

__all__ = [
    # 连接池
    "ConnectionPool",
    # 模型
    "ClusterConfig",
    "ConnectionConfig",
    "ClusterRole",
    "load_clusters",
    "validate_clusters",
    # 异常
    "ConnectionPoolError",
    "ConnectionConfigError",
    "ClusterNotFoundError",
]
