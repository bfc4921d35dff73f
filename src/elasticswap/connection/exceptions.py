"""连接层异常定义模块."""

from ..exceptions import ElasticSwapError


class ConnectionPoolError(ElasticSwapError):
    """连接池基础异常类.

    所有连接与集群配置相关异常的基类，继承自 ElasticSwapError。
    """

    pass


class ConnectionConfigError(ConnectionPoolError):
    """连接配置校验异常.

    当配置参数不合法时抛出，例如 host 为空、没有关键集群、端口越界等。
    """

    pass


class ClusterNotFoundError(ConnectionPoolError):
    """集群未找到异常.

    当关键 / 可丢弃集群列表引用了未定义的集群名称时抛出。
    """

    pass
