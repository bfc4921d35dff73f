"""版本策略接口定义模块.

不同大版本的 Elasticsearch 返回的响应结构不同，VersionPolicy 负责解释
这些响应是否代表操作成功。支持新的 ES 大版本只需要提供新的 VersionPolicy
实现，其余组件无需修改。
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class VersionPolicy(ABC):
    """ES 版本响应解释策略.

    所有方法均为纯函数，只读取响应内容，不产生副作用。
    """

    #: 策略名称，用于配置中引用
    name: str = ""

    @abstractmethod
    def response_status_field(self) -> str:
        """返回响应中表示操作状态的字段名."""

    @abstractmethod
    def create_successful(self, response: Mapping[str, Any]) -> bool:
        """判断创建索引响应是否成功."""

    @abstractmethod
    def store_successful(self, response: Mapping[str, Any]) -> bool:
        """判断单文档写入响应是否成功."""

    @abstractmethod
    def update_successful(self, response: Mapping[str, Any]) -> bool:
        """判断局部更新响应是否成功."""

    @abstractmethod
    def operation_successful_on_bulk_item(self, item: Mapping[str, Any]) -> bool:
        """判断批量响应中单个条目是否成功."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


def bulk_item_status(item: Mapping[str, Any]) -> Any:
    """从批量响应条目中取出状态码.

    条目的外层键是操作类型（index / create / update / delete），例如::

        {"index": {"_index": "products_test", "_id": "1", "status": 201}}

    Returns:
        状态码，条目结构不完整时返回 None
    """
    if not item:
        return None
    result = next(iter(item.values()))
    if not isinstance(result, Mapping):
        return None
    return result.get("status")
