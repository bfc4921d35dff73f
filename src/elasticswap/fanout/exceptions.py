"""多集群扇出异常定义模块."""

from ..exceptions import ElasticSwapError


class FanoutError(ElasticSwapError):
    """多集群扇出基础异常类."""

    pass


class UnsupportedOperationError(FanoutError):
    """不支持的操作异常.

    操作名称未定义，或某个集群客户端没有对应的处理方法时抛出。
    在联系任何集群之前检查，属于致命错误。
    """

    pass
