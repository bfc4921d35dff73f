"""多集群扇出模块.

将一个逻辑操作复制到多个集群：可丢弃集群的失败只记录并通知，
关键集群的失败中断调用并向上抛出。

示例用法:
    >>> from elasticswap.fanout import ClusterFanout, Operation, OperationCall
    >>> fanout = ClusterFanout.from_clusters(clusters, pool)
    >>> fanout.invoke(OperationCall.of(Operation.REFRESH_INDEX, "products_test"))
"""

from .exceptions import FanoutError, UnsupportedOperationError
from .models import Operation, OperationCall
from .notifiers import CollectingErrorNotifier, ErrorNotifier, LoggingErrorNotifier
from .tool import ClusterFanout

__all__ = [
    "ClusterFanout",
    "Operation",
    "OperationCall",
    "ErrorNotifier",
    "LoggingErrorNotifier",
    "CollectingErrorNotifier",
    "FanoutError",
    "UnsupportedOperationError",
]
