"""索引族注册表模块.

在启动时显式建立 "索引族 -> {文档类型: 映射类}" 的注册表，并在注册阶段
立即校验，缺失或错误的注册在启动时失败，而不是在第一次使用时。
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..typing import Document, MappingDefinition
from .base import Mapping
from .exceptions import (
    FamilyNotRegisteredError,
    MappingConflictError,
    MappingError,
    RegistrationError,
)

logger = logging.getLogger(__name__)

# 文档中携带文档类型的字段，ES 7+ 已经没有 _type
DOCUMENT_TYPE_FIELD = "type"
DOCUMENT_TYPE_SCHEMA = {"type": "keyword"}


@dataclass
class IndexFamily:
    """索引族.

    一个索引族对应一个别名，以及一组文档类型到映射类的绑定。
    索引族的 schema 是所有已注册文档类型定义的并集。

    Attributes:
        name: 索引族名称（如 "products"），也是别名的前缀
        document_types: 文档类型到映射类的绑定
    """

    name: str
    document_types: dict[str, type[Mapping]] = field(default_factory=dict)

    def mapping_class(self, document_type: str) -> type[Mapping]:
        try:
            return self.document_types[document_type]
        except KeyError:
            raise MappingError(
                f"索引族 '{self.name}' 未注册文档类型 '{document_type}'，"
                f"已注册: {sorted(self.document_types)}"
            ) from None

    def merged_properties(self) -> MappingDefinition:
        """合并所有文档类型的字段定义.

        Raises:
            MappingConflictError: 同名字段定义不一致时抛出
        """
        properties: MappingDefinition = {DOCUMENT_TYPE_FIELD: dict(DOCUMENT_TYPE_SCHEMA)}
        owners: dict[str, str] = {DOCUMENT_TYPE_FIELD: "<document type>"}
        for document_type, mapping_class in self.document_types.items():
            for field_name, schema in mapping_class.definition().items():
                if field_name in properties and properties[field_name] != schema:
                    raise MappingConflictError(
                        f"索引族 '{self.name}' 中字段 '{field_name}' 定义冲突: "
                        f"{owners[field_name]}={properties[field_name]!r}, "
                        f"{document_type}={schema!r}"
                    )
                properties[field_name] = schema
                owners.setdefault(field_name, document_type)
        return properties

    def mapping_definition(self) -> dict[str, Any]:
        """用于创建索引的 mappings 定义."""
        return {"properties": self.merged_properties()}

    def document_for(self, document_type: str, target: Any) -> Document:
        """将领域对象转换为带文档类型标记的文档."""
        document: Document = {DOCUMENT_TYPE_FIELD: document_type}
        document.update(self.mapping_class(document_type).document_for(target))
        return document


class MappingRegistry:
    """索引族注册表.

    Example:
        >>> registry = MappingRegistry()
        >>> registry.register("products", "product", ProductMapping).register(
        ...     "products", "category", CategoryMapping
        ... )
        >>> family = registry.family("products")
    """

    def __init__(self) -> None:
        self._families: dict[str, IndexFamily] = {}

    def register(
        self,
        family_name: str,
        document_type: str,
        mapping_class: type[Mapping],
    ) -> "MappingRegistry":
        """注册文档类型.

        Args:
            family_name: 索引族名称
            document_type: 文档类型名称
            mapping_class: Mapping 子类

        Returns:
            自身实例，支持链式调用

        Raises:
            RegistrationError: 名称或映射类不合法时抛出
            MappingConflictError: 与同族已注册类型的字段定义冲突时抛出
        """
        if not isinstance(family_name, str) or not family_name:
            raise RegistrationError(f"索引族名称必须是非空字符串，当前值: {family_name!r}")
        if not isinstance(document_type, str) or not document_type:
            raise RegistrationError(
                f"文档类型名称必须是非空字符串，当前值: {document_type!r}"
            )
        if not (isinstance(mapping_class, type) and issubclass(mapping_class, Mapping)):
            raise RegistrationError(
                f"文档类型 '{document_type}' 的映射类必须继承 Mapping，"
                f"当前值: {mapping_class!r}"
            )
        try:
            definition = mapping_class.definition()
        except NotImplementedError as e:
            raise RegistrationError(str(e)) from e
        if not isinstance(definition, dict) or not definition:
            raise RegistrationError(
                f"{mapping_class.__name__}.definition() 必须返回非空字典"
            )

        family = self._families.get(family_name) or IndexFamily(name=family_name)
        candidate = IndexFamily(
            name=family_name,
            document_types={**family.document_types, document_type: mapping_class},
        )
        candidate.merged_properties()
        self._families[family_name] = candidate

        logger.info(
            f"注册文档类型: {family_name}.{document_type} -> {mapping_class.__name__}"
        )
        return self

    def family(self, family_name: str) -> IndexFamily:
        """获取索引族.

        Raises:
            FamilyNotRegisteredError: 索引族未注册时抛出
        """
        try:
            return self._families[family_name]
        except KeyError:
            raise FamilyNotRegisteredError(
                f"索引族 '{family_name}' 未注册，已注册: {sorted(self._families)}"
            ) from None

    def families(self) -> list[str]:
        return sorted(self._families)

    def __contains__(self, family_name: object) -> bool:
        return family_name in self._families
