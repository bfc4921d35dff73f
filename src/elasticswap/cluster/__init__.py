"""集群客户端模块.

提供单个 ES 集群的基础操作：索引创建 / 刷新 / 关闭 / 删除、文档写入 /
批量写入 / 更新 / 删除、别名管理以及查询。

示例用法:
    >>> from elasticswap.cluster import ClusterClient
    >>> client = ClusterClient(cluster_config, pool)
    >>> client.bulk_store("products_test_20130514124608", "product", documents)
"""

from .exceptions import (
    BulkStoreFailedError,
    ClusterClientError,
    ClusterRequestError,
    CreateFailedError,
    IndexAlreadyExistsError,
    IndexNotFoundError,
    InvalidDocumentError,
    StoreFailedError,
    TransportFailureError,
    UpdateFailedError,
)
from .models import BulkItemFailure
from .tool import ClusterClient, document_id

__all__ = [
    # 核心类
    "ClusterClient",
    "document_id",
    # 数据模型
    "BulkItemFailure",
    # 异常类
    "ClusterClientError",
    "TransportFailureError",
    "ClusterRequestError",
    "IndexNotFoundError",
    "IndexAlreadyExistsError",
    "CreateFailedError",
    "InvalidDocumentError",
    "StoreFailedError",
    "UpdateFailedError",
    "BulkStoreFailedError",
]
