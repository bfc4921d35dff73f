"""查询结果模块.

提供 ES 查询结果的分页与聚合访问.
"""

from elasticswap.results.types import SourceHit
from elasticswap.results.view import QueryResultView

__all__ = [
    "QueryResultView",
    "SourceHit",
]
