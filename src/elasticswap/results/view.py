"""
ES 查询结果视图.

封装一次查询的原始响应及产生它的查询，提供分页与聚合访问.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from typing import Any

from ..typing import QueryBody, RawResponse
from .types import SourceHit


class QueryResultView:
    """
    查询结果视图.

    分页参数取自查询体的 from / size：
    - current_page = ceil((from + 1) / size)，size 缺省按 1 计算以避免除零
    - per_page = size，缺省为 DEFAULT_HITS_PER_PAGE

    使用示例:
        view = QueryResultView.fetch(cluster, "products_production", query)

        print(f"第 {view.current_page}/{view.total_pages} 页")
        if view.next_page:
            ...
    """

    # 与 ES 默认每页条数保持一致
    DEFAULT_HITS_PER_PAGE = 10

    def __init__(self, query: QueryBody, results: RawResponse) -> None:
        self.query = query or {}
        self.results = results or {}
        self._facets: dict[str, dict[str, int]] | None = None

    @classmethod
    def fetch(cls, searcher: Any, index_name: str, query: QueryBody) -> QueryResultView:
        """
        执行查询并封装结果.

        Args:
            searcher: 提供 search(index_name, query) 的对象（ClusterClient 等）
            index_name: 索引名或别名
            query: 查询体
        """
        return cls(query, searcher.search(index_name, query))

    # ========== 命中 ==========

    def _raw_hits(self) -> list[dict[str, Any]]:
        return self.results.get("hits", {}).get("hits", [])

    def ids(self) -> list[Any]:
        return [hit.get("_id") for hit in self._raw_hits()]

    def iter_sources(self) -> Iterator[SourceHit]:
        for hit in self._raw_hits():
            yield SourceHit(hit)

    # ========== 聚合 ==========

    @property
    def facets(self) -> dict[str, dict[str, int]]:
        """
        旧版 terms facets，形如 {facet 名: {term: count}}.

        响应中没有 facets 时返回空字典.
        """
        if self._facets is None:
            self._facets = {}
            for facet_name, facet_data in (self.results.get("facets") or {}).items():
                terms = self._facets.setdefault(facet_name, {})
                for term in (facet_data or {}).get("terms", []):
                    terms[str(term["term"])] = int(term["count"])
        return self._facets

    def aggregations(self, key: str) -> Any:
        """
        获取指定聚合的结果.

        有 buckets 时返回 buckets，否则返回整个聚合结果；
        响应中没有该聚合时返回空字典.
        """
        aggregation = (self.results.get("aggregations") or {}).get(key)
        if not aggregation:
            return {}
        return aggregation.get("buckets") or aggregation

    # ========== 分页 ==========

    @property
    def total_entries(self) -> int:
        # 兼容 ES 1.x 的整数与 7.x+ 的 {"value": n} 两种 total 格式
        total = self.results.get("hits", {}).get("total") or 0
        if isinstance(total, dict):
            total = total.get("value", 0)
        return int(total)

    @property
    def current_page(self) -> int:
        start = int(self.query.get("from") or 0) + 1
        size = int(self.query.get("size") or 1)
        return math.ceil(start / size)

    @property
    def per_page(self) -> int:
        return int(self.query.get("size") or self.DEFAULT_HITS_PER_PAGE)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_entries / self.per_page)

    @property
    def next_page(self) -> int | None:
        return self.current_page + 1 if self.current_page < self.total_pages else None

    @property
    def previous_page(self) -> int | None:
        return self.current_page - 1 if self.current_page > 1 else None

    @property
    def out_of_bounds(self) -> bool:
        return self.current_page > self.total_pages or self.total_pages == 0

    @property
    def offset(self) -> int:
        return self.per_page * (self.current_page - 1) if self.current_page > 0 else 0

    def to_dict(self) -> dict[str, Any]:
        """
        转换为字典格式.

        用于 API 响应序列化.
        """
        return {
            "ids": self.ids(),
            "total": self.total_entries,
            "page": self.current_page,
            "per_page": self.per_page,
            "total_pages": self.total_pages,
            "next_page": self.next_page,
            "previous_page": self.previous_page,
            "out_of_bounds": self.out_of_bounds,
        }
