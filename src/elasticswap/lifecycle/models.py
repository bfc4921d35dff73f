"""索引生命周期数据模型定义模块."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from .exceptions import LifecycleConfigError
from .utils import chunked


class LifecycleState(Enum):
    """索引族生命周期状态.

    Attributes:
        ABSENT: 别名未指向任何索引
        CREATED: 新代次已创建，尚未开始导入
        IMPORTING: 新代次持有导入别名，实时写入会双写到新代次
        LIVE: 别名指向当前代次
        RETIRING: 正在清理旧代次
    """

    ABSENT = "absent"
    CREATED = "created"
    IMPORTING = "importing"
    LIVE = "live"
    RETIRING = "retiring"


@dataclass
class LifecycleConfig:
    """生命周期配置模型.

    Attributes:
        environment: 运行环境，参与别名命名（preview 复用 production 的索引）
        site: 站点名，参与别名命名（可选）
        alias_suffix_env_vars: 存在时追加到别名末尾的环境变量，用于隔离并行 CI
        number_of_shards: 主分片数，按索引族名配置，"default" 为默认值
        number_of_replicas: 副本数，按索引族名配置，"default" 为默认值
        language: snowball 分析器语言
        synonyms_path: 英文同义词文件路径，设置后启用 en_synonym 过滤器
        import_batch_size: 导入时每批文档数量，默认 1000

    Raises:
        LifecycleConfigError: 参数不合法时抛出
    """

    environment: str = "development"
    site: str | None = None
    alias_suffix_env_vars: tuple[str, ...] = ("EXECUTOR_NUMBER", "TEST_ENV_NUMBER")
    number_of_shards: dict[str, int] = field(default_factory=dict)
    number_of_replicas: dict[str, int] = field(default_factory=dict)
    language: str = "English"
    synonyms_path: str | None = None
    import_batch_size: int = 1000

    def __post_init__(self) -> None:
        """校验生命周期配置参数合法性."""
        if not self.environment:
            raise LifecycleConfigError("environment 不能为空")
        if self.import_batch_size < 1:
            raise LifecycleConfigError(
                f"import_batch_size 必须 >= 1，当前值: {self.import_batch_size}"
            )
        self.alias_suffix_env_vars = tuple(self.alias_suffix_env_vars)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "LifecycleConfig":
        """从配置字典构建，忽略未知键."""
        known = set(cls.__dataclass_fields__)
        return cls(**{key: value for key, value in config.items() if key in known})

    def shards_for(self, family_name: str) -> int | None:
        return self.number_of_shards.get(family_name, self.number_of_shards.get("default"))

    def replicas_for(self, family_name: str) -> int | None:
        return self.number_of_replicas.get(
            family_name, self.number_of_replicas.get("default")
        )


@dataclass
class RebuildOptions:
    """rebuild 选项.

    Attributes:
        switch_alias: 创建后是否切换别名，默认 True
        import_documents: 是否导入数据并刷新，默认 False
    """

    switch_alias: bool = True
    import_documents: bool = False


@dataclass
class CleanupResult:
    """旧代次清理结果.

    Attributes:
        deleted: 已删除的代次
        closed: 已关闭的代次（保留但不可查询）
        retained: 保留的两个最新代次
        skipped: 因仍被别名引用而跳过的代次
    """

    deleted: list[str] = field(default_factory=list)
    closed: str | None = None
    retained: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class SourceFeed(Protocol):
    """数据源接口.

    为 import_documents 提供有限的、可分批的领域对象序列。
    """

    document_type: str

    def batches(self) -> Iterable[Sequence[Any]]: ...


class IterableSource:
    """把任意可迭代对象按固定大小分批的数据源.

    Example:
        >>> source = IterableSource("product", Product.listable(), batch_size=500)
    """

    def __init__(self, document_type: str, records: Iterable[Any], batch_size: int = 1000):
        if batch_size < 1:
            raise LifecycleConfigError(f"batch_size 必须 >= 1，当前值: {batch_size}")
        self.document_type = document_type
        self.records = records
        self.batch_size = batch_size

    def batches(self) -> Iterable[list[Any]]:
        return chunked(self.records, self.batch_size)
