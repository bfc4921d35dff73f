"""内置版本策略实现与策略注册表."""

from collections.abc import Mapping
from typing import Any

from .base import VersionPolicy, bulk_item_status
from .exceptions import PolicyNotFoundError

# 批量条目成功状态码：创建为 201，覆盖为 200
BULK_SUCCESS_STATUSES = (200, 201)


class InterfacePolicy1x(VersionPolicy):
    """Elasticsearch 1.x 响应策略."""

    name = "1.x"

    def response_status_field(self) -> str:
        return "acknowledged"

    def create_successful(self, response: Mapping[str, Any]) -> bool:
        return response.get("acknowledged") is True

    def store_successful(self, response: Mapping[str, Any]) -> bool:
        # 1.x 写入失败体现在 HTTP 状态码上，客户端已抛出异常
        return True

    def update_successful(self, response: Mapping[str, Any]) -> bool:
        return "_version" in response

    def operation_successful_on_bulk_item(self, item: Mapping[str, Any]) -> bool:
        return bulk_item_status(item) in BULK_SUCCESS_STATUSES


class InterfacePolicy8x(VersionPolicy):
    """Elasticsearch 7.x / 8.x 响应策略.

    7.x 起写入类响应统一使用 ``result`` 字段描述结果。
    """

    name = "8.x"

    def response_status_field(self) -> str:
        return "result"

    def create_successful(self, response: Mapping[str, Any]) -> bool:
        return response.get("acknowledged") is True

    def store_successful(self, response: Mapping[str, Any]) -> bool:
        return response.get(self.response_status_field()) in ("created", "updated")

    def update_successful(self, response: Mapping[str, Any]) -> bool:
        # noop 表示文档内容未变化，同样视为成功
        return response.get(self.response_status_field()) in ("updated", "noop")

    def operation_successful_on_bulk_item(self, item: Mapping[str, Any]) -> bool:
        return bulk_item_status(item) in BULK_SUCCESS_STATUSES


_POLICIES: dict[str, VersionPolicy] = {
    InterfacePolicy1x.name: InterfacePolicy1x(),
    InterfacePolicy8x.name: InterfacePolicy8x(),
}

DEFAULT_POLICY = InterfacePolicy8x.name


def register_policy(policy: VersionPolicy) -> None:
    """注册自定义版本策略.

    Args:
        policy: 策略实例，以 ``policy.name`` 作为键
    """
    if not policy.name:
        raise PolicyNotFoundError(f"策略 {type(policy).__name__} 缺少 name 属性")
    _POLICIES[policy.name] = policy


def get_policy(policy: str | VersionPolicy) -> VersionPolicy:
    """按名称获取版本策略.

    Args:
        policy: 策略名称（如 "1.x"、"8.x"）或策略实例

    Returns:
        策略实例

    Raises:
        PolicyNotFoundError: 名称未注册时抛出
    """
    if isinstance(policy, VersionPolicy):
        return policy
    try:
        return _POLICIES[policy]
    except KeyError:
        raise PolicyNotFoundError(
            f"未找到版本策略 '{policy}'，可用策略: {sorted(_POLICIES)}"
        ) from None
