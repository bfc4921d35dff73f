"""索引生命周期异常定义模块."""

from ..exceptions import ElasticSwapError


class LifecycleError(ElasticSwapError):
    """索引生命周期基础异常类."""

    pass


class LifecycleConfigError(LifecycleError):
    """生命周期配置校验异常."""

    pass


class GenerationNotFoundError(LifecycleError):
    """当前没有可用的索引代次.

    别名尚未指向任何索引（例如从未 create 过）时，写入等操作无法确定目标。
    """

    pass
