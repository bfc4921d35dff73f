"""映射与注册表异常定义模块."""

from ..exceptions import ElasticSwapError


class MappingError(ElasticSwapError):
    """映射基础异常类."""

    pass


class MappingFieldError(MappingError):
    """映射字段取值失败异常.

    既没有用 mapping_field 声明计算字段，目标对象上也不存在该字段时抛出。
    """

    pass


class RegistrationError(MappingError):
    """映射注册异常.

    文档类型名称、映射类或映射定义不合法时在注册阶段立即抛出。
    """

    pass


class MappingConflictError(RegistrationError):
    """同一索引族中不同文档类型对同一字段给出了不同定义."""

    pass


class FamilyNotRegisteredError(MappingError):
    """索引族未注册异常."""

    pass
