"""索引生命周期模块.

该模块管理别名背后的索引代次：
- 代次创建与命名（<别名>_<14 位时间戳>）
- 导入别名与导入期间的双写
- 别名切换
- 旧代次清理（删除过旧代次，关闭上一代）
- 强制重建

示例用法:
    >>> from elasticswap.lifecycle import IndexLifecycle, IterableSource
    >>> lifecycle = IndexLifecycle(
    ...     registry.family("products"),
    ...     fanout,
    ...     source=IterableSource("product", Product.listable()),
    ... )
    >>> lifecycle.create_import_and_switch()
"""

from .exceptions import GenerationNotFoundError, LifecycleConfigError, LifecycleError
from .models import (
    CleanupResult,
    IterableSource,
    LifecycleConfig,
    LifecycleState,
    RebuildOptions,
    SourceFeed,
)
from .tool import IndexLifecycle
from .utils import (
    GENERATION_TIMESTAMP_FORMAT,
    build_alias,
    build_settings,
    chunked,
    generation_name,
    generations_of,
)

__all__ = [
    # 核心类
    "IndexLifecycle",
    # 数据模型
    "LifecycleState",
    "LifecycleConfig",
    "RebuildOptions",
    "CleanupResult",
    "SourceFeed",
    "IterableSource",
    # 工具函数
    "GENERATION_TIMESTAMP_FORMAT",
    "build_alias",
    "build_settings",
    "chunked",
    "generation_name",
    "generations_of",
    # 异常类
    "LifecycleError",
    "LifecycleConfigError",
    "GenerationNotFoundError",
]
