"""
查询结果数据类型定义.
"""

from __future__ import annotations

from typing import Any


class SourceHit:
    """
    命中文档的属性访问封装.

    通过属性名访问 _source 中的字段，_score 与 _id 以带下划线的属性暴露，
    避免与 source 中同名的 score / id 字段冲突。

    示例:
        for hit in view.iter_sources():
            print(hit.title, hit._score)
    """

    def __init__(self, hit: dict[str, Any]) -> None:
        self._source = hit.get("_source") or {}
        self._score = hit.get("_score")
        self._id = hit.get("_id")

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._source[name]
        except KeyError:
            raise AttributeError(f"命中文档中没有字段 '{name}'") from None

    def to_dict(self) -> dict[str, Any]:
        return dict(self._source)

    def __repr__(self) -> str:
        return f"SourceHit(_id={self._id!r}, _score={self._score!r})"
