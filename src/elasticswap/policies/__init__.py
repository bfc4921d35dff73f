"""ES 版本策略模块.

提供解释不同 ES 大版本响应结构的策略对象：
    - VersionPolicy: 策略抽象基类
    - InterfacePolicy1x: ES 1.x 策略
    - InterfacePolicy8x: ES 7.x / 8.x 策略

使用示例:
    from elasticswap.policies import get_policy

    policy = get_policy("8.x")
    policy.create_successful({"acknowledged": True})
"""

from .base import VersionPolicy, bulk_item_status
from .exceptions import PolicyNotFoundError
from .versions import (
    BULK_SUCCESS_STATUSES,
    DEFAULT_POLICY,
    InterfacePolicy1x,
    InterfacePolicy8x,
    get_policy,
    register_policy,
)

__all__ = [
    "VersionPolicy",
    "InterfacePolicy1x",
    "InterfacePolicy8x",
    "get_policy",
    "register_policy",
    "bulk_item_status",
    "BULK_SUCCESS_STATUSES",
    "DEFAULT_POLICY",
    "PolicyNotFoundError",
]
