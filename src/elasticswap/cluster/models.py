"""集群客户端数据模型定义模块."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class BulkItemFailure:
    """批量写入失败条目数据类.

    Attributes:
        position: 条目在本批次中的位置（从 1 开始）
        index_name: 索引名称
        doc_id: 文档ID
        status: HTTP状态码
        error_type: 错误类型
        error_reason: 错误原因
        item: ES 返回的原始条目
    """

    position: int
    index_name: str
    doc_id: Any
    status: int | None
    error_type: str = "unknown"
    error_reason: str = ""
    item: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_item(
        cls, position: int, index_name: str, item: Mapping[str, Any]
    ) -> "BulkItemFailure":
        """从批量响应条目构建失败记录.

        Args:
            position: 条目位置（从 1 开始）
            index_name: 请求写入的索引名
            item: 原始条目，如 {"index": {"_id": "2", "status": 404, "error": {...}}}
        """
        result = next(iter(item.values()), {}) if item else {}
        if not isinstance(result, Mapping):
            result = {}
        error = result.get("error") or {}
        if isinstance(error, Mapping):
            error_type = error.get("type", "unknown")
            error_reason = error.get("reason", "")
        else:
            error_type, error_reason = "unknown", str(error)
        return cls(
            position=position,
            index_name=result.get("_index", index_name),
            doc_id=result.get("_id"),
            status=result.get("status"),
            error_type=error_type,
            error_reason=error_reason,
            item=dict(item),
        )

    def describe(self) -> str:
        return (
            f"#{self.position} (索引: {self.index_name}, 文档: {self.doc_id}, "
            f"状态: {self.status}, 原因: {self.error_type} {self.error_reason})"
        )
