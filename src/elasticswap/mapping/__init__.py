"""文档映射模块.

提供 Mapping 基类（字段 schema 定义与对象到文档的投影）
以及启动时建立的索引族注册表。

示例用法:
    >>> from elasticswap.mapping import Mapping, MappingRegistry
    >>> registry = MappingRegistry().register("products", "product", ProductMapping)
"""

from .base import Mapping, mapping_field
from .exceptions import (
    FamilyNotRegisteredError,
    MappingConflictError,
    MappingError,
    MappingFieldError,
    RegistrationError,
)
from .registry import DOCUMENT_TYPE_FIELD, IndexFamily, MappingRegistry

__all__ = [
    "Mapping",
    "mapping_field",
    "IndexFamily",
    "MappingRegistry",
    "DOCUMENT_TYPE_FIELD",
    "MappingError",
    "MappingFieldError",
    "RegistrationError",
    "MappingConflictError",
    "FamilyNotRegisteredError",
]
