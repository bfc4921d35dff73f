"""集群客户端核心工具类.

ClusterClient 只负责与单个 ES 集群的物理交互，索引的内容与定义由
lifecycle 模块管理。所有响应的成功判定委托给 VersionPolicy。
"""

import logging
import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from elasticsearch import Elasticsearch
from elasticsearch.exceptions import ApiError, NotFoundError, TransportError

from ..connection import ClusterConfig, ClusterRole, ConnectionPool
from ..policies import VersionPolicy
from ..typing import (
    Document,
    DocumentBatch,
    MappingDefinition,
    QueryBody,
    SettingsDefinition,
)
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

logger = logging.getLogger(__name__)


def _body(response: Any) -> Any:
    """取出 ApiResponse 的响应体，普通字典原样返回."""
    if isinstance(response, Mapping):
        return response
    return getattr(response, "body", response)


def _error_type(error: ApiError) -> str:
    body = error.body if isinstance(error.body, Mapping) else {}
    detail = body.get("error")
    if isinstance(detail, Mapping):
        return str(detail.get("type", ""))
    return str(detail or error.message)


def document_id(document: Mapping[str, Any]) -> Any:
    """取出文档 ID，兼容 "id" 以外的 "_id" 写法.

    Returns:
        文档 ID，不存在时返回 None
    """
    doc_id = document.get("id")
    if doc_id is None:
        doc_id = document.get("_id")
    return doc_id


class ClusterClient:
    """单个 ES 集群的客户端.

    每个配置的集群对应一个实例，底层 Elasticsearch 连接从共享的 ConnectionPool
    获取。所有方法都是同步的，可能阻塞在网络 I/O 上；底层客户端线程安全，
    实例可被多个调用方并发使用。

    Args:
        config: 集群配置
        pool: 连接池

    Example:
        >>> pool = ConnectionPool()
        >>> client = ClusterClient(ClusterConfig(host="localhost"), pool)
        >>> client.create_index("products_test_20130514124608", mappings={...})
    """

    def __init__(self, config: ClusterConfig, pool: ConnectionPool):
        self.config = config
        self._policy: VersionPolicy = config.version_policy
        self._client: Elasticsearch = pool.get_client(config)
        self._log_responses = pool.connection_config.log_responses

    @property
    def address(self) -> str:
        return self.config.address

    @property
    def role(self) -> ClusterRole:
        return self.config.role

    @property
    def policy(self) -> VersionPolicy:
        return self._policy

    def __repr__(self) -> str:
        return f"ClusterClient({self.address}, role={self.role.value})"

    @contextmanager
    def _translate_errors(self, action: str, index_name: str | None = None) -> Iterator[None]:
        """将 elasticsearch 异常转换为带集群上下文的 ClusterClientError."""
        try:
            yield
        except ClusterClientError:
            raise
        except NotFoundError as e:
            raise IndexNotFoundError(
                f"[{self.address}] {action}失败，索引 '{index_name}' 不存在: {e}",
                cluster=self.address,
                index_name=index_name,
                status=404,
            ) from e
        except ApiError as e:
            status = getattr(e, "status_code", None)
            if _error_type(e) == "resource_already_exists_exception":
                raise IndexAlreadyExistsError(
                    f"[{self.address}] 索引 '{index_name}' 已存在",
                    cluster=self.address,
                    index_name=index_name,
                    status=status,
                ) from e
            raise ClusterRequestError(
                f"[{self.address}] {action}失败 (索引: '{index_name}'): {e}",
                cluster=self.address,
                index_name=index_name,
                status=status,
            ) from e
        except TransportError as e:
            raise TransportFailureError(
                f"[{self.address}] {action}时无法连接集群 (索引: '{index_name}'): {e}",
                cluster=self.address,
                index_name=index_name,
            ) from e

    def _log_response(self, action: str, response: Any) -> None:
        if self._log_responses:
            logger.info(f"[{self.address}] {action} 响应: {response!r}")

    @staticmethod
    def _replay_hint(subject: str = "该文档") -> str:
        return (
            f"{subject}可以单独重放，例如 lifecycle.store({{'product': Product.get(1234)}})"
        )

    # ==================== 索引管理 ====================

    def create_index(
        self,
        index_name: str,
        mappings: MappingDefinition | None = None,
        settings: SettingsDefinition | None = None,
    ) -> Any:
        """创建索引.

        Args:
            index_name: 索引名称（通常为带时间戳的代次名）
            mappings: 索引映射定义
            settings: 索引设置定义

        Returns:
            ES 原始响应

        Raises:
            IndexAlreadyExistsError: 索引已存在时抛出
            CreateFailedError: 版本策略判定响应失败时抛出
        """
        kwargs: dict[str, Any] = {"index": index_name}
        if mappings:
            kwargs["mappings"] = mappings
        if settings:
            kwargs["settings"] = settings

        with self._translate_errors("创建索引", index_name):
            response = _body(self._client.indices.create(**kwargs))

        if not self._policy.create_successful(response):
            raise CreateFailedError(
                f"[{self.address}] 创建索引 '{index_name}' 失败: {response!r}",
                cluster=self.address,
                index_name=index_name,
                response=response,
            )

        logger.info(f"[{self.address}] 索引 '{index_name}' 创建成功")
        return response

    def refresh_index(self, index_name: str) -> Any:
        with self._translate_errors("刷新索引", index_name):
            return _body(self._client.indices.refresh(index=index_name))

    def close_index(self, index_name: str) -> Any:
        with self._translate_errors("关闭索引", index_name):
            response = _body(self._client.indices.close(index=index_name))
        logger.info(f"[{self.address}] 索引 '{index_name}' 已关闭")
        return response

    def delete_index(self, index_name: str) -> Any:
        """删除索引.

        Raises:
            IndexNotFoundError: 索引不存在时抛出
        """
        with self._translate_errors("删除索引", index_name):
            response = _body(self._client.indices.delete(index=index_name))
        logger.info(f"[{self.address}] 索引 '{index_name}' 已删除")
        return response

    # ==================== 文档写入 ====================

    def store_document(
        self, index_name: str, document_type: str, document: Document
    ) -> Any:
        """写入单个文档.

        Args:
            index_name: 索引名称
            document_type: 文档类型（已包含在文档的 type 字段中）
            document: 文档内容，必须包含 id

        Returns:
            ES 原始响应

        Raises:
            InvalidDocumentError: 文档缺少 id 时抛出
            StoreFailedError: 版本策略判定响应失败时抛出
        """
        doc_id = document_id(document)
        if doc_id is None:
            raise InvalidDocumentError(
                f"[{self.address}] {document_type} 文档缺少 id，无法写入 '{index_name}'",
                cluster=self.address,
                index_name=index_name,
            )

        with self._translate_errors("写入文档", index_name):
            response = _body(
                self._client.index(index=index_name, id=doc_id, document=document)
            )

        if not self._policy.store_successful(response):
            raise StoreFailedError(
                f"[{self.address}] 写入 {document_type} 文档 {doc_id} 到 "
                f"'{index_name}' 失败: {response!r}。{self._replay_hint()}",
                cluster=self.address,
                index_name=index_name,
                doc_id=doc_id,
                document=document,
                response=response,
            )

        self._log_response("写入文档", response)
        return response

    def bulk_store(
        self,
        index_name: str,
        document_type: str,
        documents: DocumentBatch,
    ) -> Any:
        """批量写入文档.

        整批文档通过一次 _bulk 请求写入，随后逐条检查响应条目。
        任意条目失败时汇总所有失败条目后抛出，成功的条目保持已写入状态。

        Args:
            index_name: 索引名称
            document_type: 文档类型
            documents: 文档列表，每个文档必须包含 id

        Returns:
            ES 原始响应

        Raises:
            InvalidDocumentError: 存在缺少 id 的文档时抛出（不会发送请求）
            BulkStoreFailedError: 存在失败条目时抛出
        """
        if not documents:
            return {"items": [], "errors": False}

        operations: list[dict[str, Any]] = []
        for document in documents:
            doc_id = document_id(document)
            if doc_id is None:
                raise InvalidDocumentError(
                    f"[{self.address}] 批量写入 '{index_name}' 时存在缺少 id 的 "
                    f"{document_type} 文档: {document!r}",
                    cluster=self.address,
                    index_name=index_name,
                )
            operations.append({"index": {"_index": index_name, "_id": doc_id}})
            operations.append(document)

        with self._translate_errors("批量写入", index_name):
            response = _body(self._client.bulk(operations=operations))

        failures = [
            BulkItemFailure.from_item(position, index_name, item)
            for position, item in enumerate(response.get("items", []), 1)
            if not self._policy.operation_successful_on_bulk_item(item)
        ]
        if failures:
            details = ", ".join(failure.describe() for failure in failures)
            raise BulkStoreFailedError(
                f"[{self.address}] 批量写入 '{index_name}' 时 {len(failures)}/"
                f"{len(documents)} 个 {document_type} 文档失败，"
                f"{self._replay_hint('这些文档')}: {details}",
                cluster=self.address,
                index_name=index_name,
                failures=failures,
            )

        logger.debug(
            f"[{self.address}] 批量写入 '{index_name}' 成功: {len(documents)} 个文档"
        )
        return response

    def update_document(
        self,
        index_name: str,
        document_type: str,
        doc_id: Any,
        fields: Document,
    ) -> Any:
        """局部更新文档.

        Raises:
            UpdateFailedError: 版本策略判定响应失败时抛出
        """
        with self._translate_errors("更新文档", index_name):
            response = _body(
                self._client.update(index=index_name, id=doc_id, doc=fields)
            )

        if not self._policy.update_successful(response):
            raise UpdateFailedError(
                f"[{self.address}] 更新 {document_type} 文档 {doc_id} "
                f"({fields!r}) 于 '{index_name}' 失败: {response!r}。"
                f"{self._replay_hint()}",
                cluster=self.address,
                index_name=index_name,
                doc_id=doc_id,
                document=fields,
                response=response,
            )
        return response

    def delete_document(self, index_name: str, document_type: str, doc_id: Any) -> Any:
        """删除文档.

        文档不存在（404）视为删除成功，返回 None。

        Returns:
            ES 原始响应，文档不存在时返回 None
        """
        try:
            with self._translate_errors("删除文档", index_name):
                response = _body(self._client.delete(index=index_name, id=doc_id))
        except IndexNotFoundError:
            logger.warning(
                f"[{self.address}] 删除文档返回 404，视为已删除: "
                f"{index_name}/{document_type}/{doc_id}"
            )
            return None

        self._log_response("删除文档", response)
        return response

    # ==================== 别名管理 ====================

    def assign_alias(self, index_name: str, alias_name: str) -> Any:
        with self._translate_errors("添加别名", index_name):
            return _body(self._client.indices.put_alias(index=index_name, name=alias_name))

    def unassign_alias(self, index_name: str, alias_name: str) -> Any:
        with self._translate_errors("移除别名", index_name):
            return _body(
                self._client.indices.delete_alias(index=index_name, name=alias_name)
            )

    def indices_for_alias(self, alias_name: str) -> list[str]:
        """获取当前持有别名的全部索引."""
        with self._translate_errors("查询别名"):
            if not self._client.indices.exists_alias(name=alias_name):
                return []
            return list(_body(self._client.indices.get_alias(name=alias_name)).keys())

    def set_alias(self, alias_name: str, index_name: str) -> Any:
        """将别名切换到指定索引.

        先为新索引添加别名，再从其余索引上移除别名。这一系列调用不是事务性的：
        中途失败时别名可能同时指向多个索引，需要人工处理或强制 rebuild，
        但别名不会悬空。

        Args:
            alias_name: 别名
            index_name: 新的目标索引

        Returns:
            添加别名的 ES 原始响应
        """
        current_indices = self.indices_for_alias(alias_name)

        response = self.assign_alias(index_name, alias_name)
        for current in current_indices:
            if current != index_name:
                self.unassign_alias(current, alias_name)

        logger.info(
            f"[{self.address}] 别名 '{alias_name}' 已切换: {current_indices} -> '{index_name}'"
        )
        return response

    def resolve_alias(self, alias_name: str) -> str | None:
        """解析别名当前指向的索引.

        按约定一个别名只指向一个索引（并不强制），返回第一个匹配项。

        Returns:
            索引名，别名不存在时返回 None
        """
        with self._translate_errors("解析别名"):
            index_aliases = _body(
                self._client.indices.get_alias(
                    index="*", expand_wildcards=["open", "closed"]
                )
            )

        for index_name, index_config in index_aliases.items():
            aliases = (index_config or {}).get("aliases") or {}
            if alias_name in aliases:
                return index_name
        return None

    def list_generations(self) -> set[str]:
        """列出集群上的全部索引（包括已关闭的索引）."""
        with self._translate_errors("列出索引"):
            index_aliases = _body(
                self._client.indices.get_alias(
                    index="*", expand_wildcards=["open", "closed"]
                )
            )
        return set(index_aliases.keys())

    # ==================== 查询 ====================

    def search(self, index_name: str, query: QueryBody) -> Any:
        """执行查询，查询体原样转发.

        Args:
            index_name: 索引名或别名
            query: 查询体

        Returns:
            ES 原始响应
        """
        logger.info(f"在 {self.address}/{index_name} 上执行查询: {query!r}")

        start_time = time.perf_counter()
        with self._translate_errors("查询", index_name):
            results = _body(self._client.search(index=index_name, body=query))
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            f"  => {self.address}/{index_name} 查询耗时 {elapsed_ms:.2f}ms "
            f"(ES 内部 {results.get('took')}ms)"
        )
        return results
