"""elasticswap 异常定义模块."""


class ElasticSwapError(Exception):
    """elasticswap 基础异常类."""

    pass
