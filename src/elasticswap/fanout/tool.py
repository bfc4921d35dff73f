"""多集群扇出核心工具类."""

import logging
from collections.abc import Sequence
from typing import Any

from ..cluster import ClusterClient
from ..connection import ClusterConfig, ClusterRole, ConnectionPool, validate_clusters
from ..typing import (
    Document,
    DocumentBatch,
    MappingDefinition,
    QueryBody,
    SettingsDefinition,
)
from .exceptions import FanoutError, UnsupportedOperationError
from .models import Operation, OperationCall
from .notifiers import ErrorNotifier, LoggingErrorNotifier

logger = logging.getLogger(__name__)


class ClusterFanout:
    """多集群扇出.

    将一个逻辑操作依次应用到所有配置的集群上，并按集群角色区别处理失败：

    - 先依次调用可丢弃集群，任何异常只记录日志并交给 ErrorNotifier，然后继续；
    - 再按配置顺序调用关键集群，第一个异常立即原样向上抛出，后续集群不再调用。

    返回值是最后一个关键集群的结果。关键集群被假定为彼此一致，所以结果只是
    一个代表值而非合并值；若关键集群之间出现不一致，应当整体 rebuild。

    Args:
        critical: 关键集群客户端列表（按调用顺序）
        dispensable: 可丢弃集群客户端列表
        notifier: 可丢弃集群错误通知器，默认只写日志

    Example:
        >>> fanout = ClusterFanout.from_clusters(load_clusters(settings), pool)
        >>> fanout.store_document("products_test", "product", {"id": 1})
    """

    def __init__(
        self,
        critical: Sequence[Any],
        dispensable: Sequence[Any] = (),
        notifier: ErrorNotifier | None = None,
    ):
        self._critical = list(critical)
        self._dispensable = list(dispensable)
        self._notifier = notifier or LoggingErrorNotifier()

    @classmethod
    def from_clusters(
        cls,
        clusters: list[ClusterConfig],
        pool: ConnectionPool,
        notifier: ErrorNotifier | None = None,
    ) -> "ClusterFanout":
        """根据集群配置构建扇出实例.

        Args:
            clusters: 集群配置列表，关键集群的相对顺序即调用顺序
            pool: 连接池
            notifier: 错误通知器

        Raises:
            ConnectionConfigError: 没有关键集群或名称重复时抛出
        """
        validate_clusters(clusters)
        critical = [
            ClusterClient(c, pool) for c in clusters if c.role == ClusterRole.CRITICAL
        ]
        dispensable = [
            ClusterClient(c, pool) for c in clusters if c.role == ClusterRole.DISPENSABLE
        ]
        logger.info(
            f"初始化多集群扇出: 关键集群 {[c.address for c in critical]}, "
            f"可丢弃集群 {[c.address for c in dispensable]}"
        )
        return cls(critical, dispensable, notifier)

    @property
    def critical_clusters(self) -> list[Any]:
        return list(self._critical)

    @property
    def dispensable_clusters(self) -> list[Any]:
        return list(self._dispensable)

    @property
    def primary(self) -> Any:
        """只读查询使用的代表集群：最后一个关键集群."""
        if not self._critical:
            raise FanoutError("未配置关键集群，无法选择查询集群")
        return self._critical[-1]

    @staticmethod
    def _address(cluster: Any) -> str:
        return getattr(cluster, "address", repr(cluster))

    def _handler(self, cluster: Any, operation: Operation):
        handler = getattr(cluster, operation.value, None)
        if not callable(handler):
            raise UnsupportedOperationError(
                f"集群 {self._address(cluster)} 不支持操作 '{operation.value}'"
            )
        return handler

    def invoke(self, call: OperationCall) -> Any:
        """在所有集群上执行一次操作.

        Args:
            call: 操作描述

        Returns:
            最后一个关键集群的结果，没有关键集群时返回 None

        Raises:
            UnsupportedOperationError: 任一集群不支持该操作时抛出（不会联系任何集群）
            Exception: 关键集群上的第一个异常，原样抛出
        """
        # 先检查全部集群，保证不支持的操作不会只执行一半
        dispensable = [(c, self._handler(c, call.operation)) for c in self._dispensable]
        critical = [(c, self._handler(c, call.operation)) for c in self._critical]

        for cluster, handler in dispensable:
            try:
                handler(*call.args, **call.kwargs)
            except Exception as e:
                logger.exception(
                    f"可丢弃集群 {self._address(cluster)} 执行 {call.describe()} 失败: {e}"
                )
                self._notify(e, cluster, call)

        result = None
        for _cluster, handler in critical:
            result = handler(*call.args, **call.kwargs)
        return result

    def call(self, operation: Operation | str, *args: Any, **kwargs: Any) -> Any:
        """按操作名执行扇出调用，是 invoke 的便捷形式."""
        return self.invoke(OperationCall.of(operation, *args, **kwargs))

    def _notify(self, error: Exception, cluster: Any, call: OperationCall) -> None:
        context = {
            "cluster": self._address(cluster),
            "operation": call.operation.value,
            "call": call.describe(),
        }
        try:
            self._notifier.notify(error, context)
        except Exception as notify_error:
            logger.error(f"发送可丢弃集群错误通知失败: {notify_error}")

    # ==================== 类型化操作 ====================

    def create_index(
        self,
        index_name: str,
        mappings: MappingDefinition | None = None,
        settings: SettingsDefinition | None = None,
    ) -> Any:
        return self.call(
            Operation.CREATE_INDEX, index_name, mappings=mappings, settings=settings
        )

    def refresh_index(self, index_name: str) -> Any:
        return self.call(Operation.REFRESH_INDEX, index_name)

    def close_index(self, index_name: str) -> Any:
        return self.call(Operation.CLOSE_INDEX, index_name)

    def delete_index(self, index_name: str) -> Any:
        return self.call(Operation.DELETE_INDEX, index_name)

    def store_document(self, index_name: str, document_type: str, document: Document) -> Any:
        return self.call(Operation.STORE_DOCUMENT, index_name, document_type, document)

    def bulk_store(
        self, index_name: str, document_type: str, documents: DocumentBatch
    ) -> Any:
        return self.call(Operation.BULK_STORE, index_name, document_type, documents)

    def update_document(
        self, index_name: str, document_type: str, doc_id: Any, fields: Document
    ) -> Any:
        return self.call(
            Operation.UPDATE_DOCUMENT, index_name, document_type, doc_id, fields
        )

    def delete_document(self, index_name: str, document_type: str, doc_id: Any) -> Any:
        return self.call(Operation.DELETE_DOCUMENT, index_name, document_type, doc_id)

    def assign_alias(self, index_name: str, alias_name: str) -> Any:
        return self.call(Operation.ASSIGN_ALIAS, index_name, alias_name)

    def unassign_alias(self, index_name: str, alias_name: str) -> Any:
        return self.call(Operation.UNASSIGN_ALIAS, index_name, alias_name)

    def set_alias(self, alias_name: str, index_name: str) -> Any:
        return self.call(Operation.SET_ALIAS, alias_name, index_name)

    def resolve_alias(self, alias_name: str) -> str | None:
        return self.call(Operation.RESOLVE_ALIAS, alias_name)

    def list_generations(self) -> set[str]:
        return self.call(Operation.LIST_GENERATIONS) or set()

    def search(self, index_name: str, query: QueryBody) -> Any:
        return self.call(Operation.SEARCH, index_name, query)
