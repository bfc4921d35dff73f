"""版本策略异常定义模块."""

from ..exceptions import ElasticSwapError


class PolicyNotFoundError(ElasticSwapError):
    """版本策略未找到异常.

    当配置中引用的策略名称未在策略表中注册时抛出。
    """

    pass
