"""映射基类模块.

Mapping 描述一种文档类型：definition() 声明可搜索的字段 schema，
document_for() 将领域对象投影为可写入的文档。

例如一个简化的商品映射::

    class ProductMapping(Mapping):
        @classmethod
        def definition(cls):
            return {
                "id": {"type": "long"},
                "title": {"type": "text", "analyzer": "light_english"},
                "keywords": {"type": "keyword"},
            }

        @mapping_field("keywords")
        def keywords(self):
            return self.target.details.keywords

没有用 mapping_field 声明的字段直接从目标对象读取：
先按属性读取，目标为字典时按键读取。
"""

import inspect
from collections.abc import Callable, Mapping as MappingABC
from typing import Any

from ..typing import Document, MappingDefinition
from .exceptions import MappingFieldError

_FIELD_MARKER = "_mapping_field_name"


def mapping_field(name: str) -> Callable:
    """将映射类上的方法声明为某个字段的计算逻辑."""

    def decorator(func: Callable) -> Callable:
        setattr(func, _FIELD_MARKER, name)
        return func

    return decorator


class Mapping:
    """映射基类.

    子类必须实现 definition()，可以通过 mapping_field 声明计算字段。
    计算字段表在子类定义时建立，是显式、可枚举的。
    """

    _field_resolvers: dict[str, str] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        resolvers = dict(cls._field_resolvers)
        for attr_name, value in vars(cls).items():
            field_name = getattr(value, _FIELD_MARKER, None)
            if field_name:
                resolvers[field_name] = attr_name
        cls._field_resolvers = resolvers

    @classmethod
    def definition(cls) -> MappingDefinition:
        raise NotImplementedError(f"{cls.__name__} 必须实现 definition()")

    @classmethod
    def computed_fields(cls) -> list[str]:
        return sorted(cls._field_resolvers)

    @classmethod
    def document_for(cls, target: Any) -> Document:
        return cls(target).document()

    def __init__(self, target: Any):
        self.target = target

    def document(self) -> Document:
        """按 definition() 的字段顺序构建文档."""
        return {field: self.value_for(field) for field in self.definition()}

    def value_for(self, field: str) -> Any:
        resolver = self._field_resolvers.get(field)
        if resolver is not None:
            return getattr(self, resolver)()

        if isinstance(self.target, MappingABC):
            try:
                return self.target[field]
            except KeyError:
                raise MappingFieldError(
                    f"{type(self).__name__}: 目标字典中缺少字段 '{field}'"
                ) from None

        try:
            value = getattr(self.target, field)
        except AttributeError:
            raise MappingFieldError(
                f"{type(self).__name__}: {type(self.target).__name__} 对象没有字段 "
                f"'{field}'，请在映射类中用 @mapping_field('{field}') 声明"
            ) from None
        if inspect.ismethod(value):
            return value()
        return value
