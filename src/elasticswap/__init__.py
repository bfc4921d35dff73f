"""elasticswap - Elasticsearch 索引代次与多集群写入管理工具.

在稳定的别名背后管理索引代次，支持无停机重建与切换，
并将写入同步扇出到多个关键 / 可丢弃集群。

主要功能:
    - IndexLifecycle: 创建 / 导入 / 切换 / 清理索引代次，导入期间双写
    - ClusterFanout: 按集群角色区别处理失败的多集群扇出
    - ClusterClient: 单集群基础操作
    - QueryResultView: 查询结果分页与聚合访问

使用示例:
    from elasticswap import ClusterFanout, ConnectionPool, IndexLifecycle, load_clusters

    pool = ConnectionPool()
    fanout = ClusterFanout.from_clusters(load_clusters(settings), pool)
    lifecycle = IndexLifecycle(registry.family("products"), fanout)
    lifecycle.rebuild()
"""

__version__ = "0.1.0"

# 导出集群客户端
from elasticswap.cluster import (
    BulkItemFailure,
    BulkStoreFailedError,
    ClusterClient,
    ClusterClientError,
    CreateFailedError,
    IndexAlreadyExistsError,
    IndexNotFoundError,
    StoreFailedError,
    TransportFailureError,
    UpdateFailedError,
)

# 导出连接管理
from elasticswap.connection import (
    ClusterConfig,
    ClusterRole,
    ConnectionConfig,
    ConnectionPool,
    load_clusters,
)

# 导出异常
from elasticswap.exceptions import ElasticSwapError

# 导出多集群扇出
from elasticswap.fanout import (
    ClusterFanout,
    ErrorNotifier,
    Operation,
    OperationCall,
    UnsupportedOperationError,
)

# 导出生命周期
from elasticswap.lifecycle import (
    IndexLifecycle,
    IterableSource,
    LifecycleConfig,
    LifecycleState,
    RebuildOptions,
)

# 导出映射
from elasticswap.mapping import IndexFamily, Mapping, MappingRegistry, mapping_field

# 导出版本策略
from elasticswap.policies import InterfacePolicy1x, InterfacePolicy8x, VersionPolicy

# 导出查询结果
from elasticswap.results import QueryResultView

__all__ = [
    # 版本
    "__version__",
    # 连接
    "ConnectionPool",
    "ClusterConfig",
    "ConnectionConfig",
    "ClusterRole",
    "load_clusters",
    # 版本策略
    "VersionPolicy",
    "InterfacePolicy1x",
    "InterfacePolicy8x",
    # 集群客户端
    "ClusterClient",
    "BulkItemFailure",
    # 扇出
    "ClusterFanout",
    "Operation",
    "OperationCall",
    "ErrorNotifier",
    # 映射
    "Mapping",
    "mapping_field",
    "IndexFamily",
    "MappingRegistry",
    # 生命周期
    "IndexLifecycle",
    "IterableSource",
    "LifecycleConfig",
    "LifecycleState",
    "RebuildOptions",
    # 查询结果
    "QueryResultView",
    # 异常
    "ElasticSwapError",
    "ClusterClientError",
    "TransportFailureError",
    "IndexNotFoundError",
    "IndexAlreadyExistsError",
    "CreateFailedError",
    "StoreFailedError",
    "UpdateFailedError",
    "BulkStoreFailedError",
    "UnsupportedOperationError",
]
