"""集群客户端异常定义模块.

所有异常都携带出错的集群地址与索引名，文档级异常额外携带文档 ID，
便于定位并手工重放单个失败的写入。
"""

from typing import Any

from ..exceptions import ElasticSwapError


class ClusterClientError(ElasticSwapError):
    """集群客户端基础异常类.

    Attributes:
        cluster: 出错集群地址 "host:port"
        index_name: 出错的索引名
    """

    def __init__(
        self,
        message: str,
        cluster: str | None = None,
        index_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.cluster = cluster
        self.index_name = index_name


class TransportFailureError(ClusterClientError):
    """传输层异常.

    网络错误或超时，在客户端重试次数耗尽后抛出。
    """

    pass


class ClusterRequestError(ClusterClientError):
    """ES 返回了非成功状态码.

    Attributes:
        status: HTTP 状态码
    """

    def __init__(
        self,
        message: str,
        cluster: str | None = None,
        index_name: str | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message, cluster=cluster, index_name=index_name)
        self.status = status


class IndexNotFoundError(ClusterRequestError):
    """索引不存在异常."""

    pass


class IndexAlreadyExistsError(ClusterRequestError):
    """索引已存在异常."""

    pass


class CreateFailedError(ClusterClientError):
    """创建索引的响应被版本策略判定为失败."""

    def __init__(
        self,
        message: str,
        cluster: str | None = None,
        index_name: str | None = None,
        response: Any = None,
    ) -> None:
        super().__init__(message, cluster=cluster, index_name=index_name)
        self.response = response


class InvalidDocumentError(ClusterClientError):
    """文档缺少 id 等必需信息."""

    pass


class StoreFailedError(ClusterClientError):
    """单文档写入的响应被版本策略判定为失败.

    Attributes:
        doc_id: 文档 ID
        document: 写入的文档
        response: ES 原始响应
    """

    def __init__(
        self,
        message: str,
        cluster: str | None = None,
        index_name: str | None = None,
        doc_id: Any = None,
        document: Any = None,
        response: Any = None,
    ) -> None:
        super().__init__(message, cluster=cluster, index_name=index_name)
        self.doc_id = doc_id
        self.document = document
        self.response = response


class UpdateFailedError(StoreFailedError):
    """局部更新的响应被版本策略判定为失败."""

    pass


class BulkStoreFailedError(ClusterClientError):
    """批量写入中存在失败条目.

    失败按整批汇总上报，成功的条目已经写入。

    Attributes:
        failures: 失败条目列表（BulkItemFailure）
    """

    def __init__(
        self,
        message: str,
        cluster: str | None = None,
        index_name: str | None = None,
        failures: list | None = None,
    ) -> None:
        super().__init__(message, cluster=cluster, index_name=index_name)
        self.failures = failures or []

    @property
    def failed_ids(self) -> list[Any]:
        return [failure.doc_id for failure in self.failures]
