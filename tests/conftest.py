"""测试公共 fixtures.

InMemoryCluster 在内存中模拟单个集群客户端的行为（索引、别名、文档、关闭状态），
供扇出与生命周期测试使用。通过 fail_on 可以让指定操作抛出异常。
"""

from datetime import datetime, timedelta
from typing import Any

import pytest

from elasticswap.cluster import (
    ClusterRequestError,
    IndexAlreadyExistsError,
    IndexNotFoundError,
    InvalidDocumentError,
)
from elasticswap.connection import ClusterRole
from elasticswap.fanout import ClusterFanout, CollectingErrorNotifier
from elasticswap.mapping import Mapping, MappingRegistry, mapping_field


class InMemoryCluster:
    """内存集群客户端."""

    def __init__(self, address: str, role: ClusterRole = ClusterRole.CRITICAL):
        self.address = address
        self.role = role
        self.indices: dict[str, dict[str, Any]] = {}
        self.fail_on: dict[str, Exception] = {}
        self.calls: list[tuple[Any, ...]] = []

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, *args))
        error = self.fail_on.get(operation)
        if error is not None:
            raise error

    def _index(self, index_name: str) -> dict[str, Any]:
        try:
            return self.indices[index_name]
        except KeyError:
            raise IndexNotFoundError(
                f"[{self.address}] 索引 '{index_name}' 不存在",
                cluster=self.address,
                index_name=index_name,
                status=404,
            ) from None

    def _target(self, name: str) -> dict[str, Any]:
        # 写入可以指向索引名或别名，已关闭的索引拒绝读写
        index = None
        for index_name, candidate in self.indices.items():
            if index_name == name or name in candidate["aliases"]:
                index = candidate
                break
        if index is None:
            index = self._index(name)
        if index["closed"]:
            raise ClusterRequestError(
                f"[{self.address}] 索引 '{name}' 已关闭",
                cluster=self.address,
                index_name=name,
                status=400,
            )
        return index

    def operations(self, operation: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == operation]

    def documents(self, index_name: str) -> dict[Any, dict[str, Any]]:
        return self.indices[index_name]["docs"]

    # ========== 索引 ==========

    def create_index(self, index_name, mappings=None, settings=None):
        self._record("create_index", index_name)
        if index_name in self.indices:
            raise IndexAlreadyExistsError(
                f"[{self.address}] 索引 '{index_name}' 已存在",
                cluster=self.address,
                index_name=index_name,
                status=400,
            )
        self.indices[index_name] = {
            "aliases": set(),
            "docs": {},
            "closed": False,
            "mappings": mappings,
            "settings": settings,
        }
        return {"acknowledged": True, "index": index_name}

    def refresh_index(self, index_name):
        self._record("refresh_index", index_name)
        self._target(index_name)
        return {"_shards": {"failed": 0}}

    def close_index(self, index_name):
        self._record("close_index", index_name)
        self._index(index_name)["closed"] = True
        return {"acknowledged": True}

    def delete_index(self, index_name):
        self._record("delete_index", index_name)
        self._index(index_name)
        del self.indices[index_name]
        return {"acknowledged": True}

    # ========== 文档 ==========

    def store_document(self, index_name, document_type, document):
        self._record("store_document", index_name, document_type, document)
        if document.get("id") is None:
            raise InvalidDocumentError("文档缺少 id", cluster=self.address)
        self._target(index_name)["docs"][document["id"]] = dict(document)
        return {"result": "created", "_id": str(document["id"])}

    def bulk_store(self, index_name, document_type, documents):
        self._record("bulk_store", index_name, document_type, documents)
        index = self._target(index_name)
        for document in documents:
            index["docs"][document["id"]] = dict(document)
        return {"errors": False, "items": [{"index": {"status": 201}} for _ in documents]}

    def update_document(self, index_name, document_type, doc_id, fields):
        self._record("update_document", index_name, document_type, doc_id, fields)
        self._target(index_name)["docs"][doc_id].update(fields)
        return {"result": "updated"}

    def delete_document(self, index_name, document_type, doc_id):
        self._record("delete_document", index_name, document_type, doc_id)
        docs = self._target(index_name)["docs"]
        if doc_id not in docs:
            return None
        del docs[doc_id]
        return {"result": "deleted"}

    # ========== 别名 ==========

    def assign_alias(self, index_name, alias_name):
        self._record("assign_alias", index_name, alias_name)
        self._index(index_name)["aliases"].add(alias_name)
        return {"acknowledged": True}

    def unassign_alias(self, index_name, alias_name):
        self._record("unassign_alias", index_name, alias_name)
        self._index(index_name)["aliases"].discard(alias_name)
        return {"acknowledged": True}

    def indices_for_alias(self, alias_name):
        return sorted(
            name for name, index in self.indices.items() if alias_name in index["aliases"]
        )

    def set_alias(self, alias_name, index_name):
        self._record("set_alias", alias_name, index_name)
        current = self.indices_for_alias(alias_name)
        response = self.assign_alias(index_name, alias_name)
        for name in current:
            if name != index_name:
                self.unassign_alias(name, alias_name)
        return response

    def resolve_alias(self, alias_name):
        self._record("resolve_alias", alias_name)
        for name in sorted(self.indices):
            if alias_name in self.indices[name]["aliases"]:
                return name
        return None

    def list_generations(self):
        self._record("list_generations")
        return set(self.indices)

    # ========== 查询 ==========

    def search(self, index_name, query):
        self._record("search", index_name, query)
        docs = list(self._target(index_name)["docs"].values())
        return {
            "took": 1,
            "hits": {
                "total": {"value": len(docs), "relation": "eq"},
                "hits": [
                    {"_id": str(doc["id"]), "_score": 1.0, "_source": doc} for doc in docs
                ],
            },
        }


class SteppingClock:
    """每次调用前进一秒的时钟，保证代次名称唯一且递增."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


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
        return [word.lower() for word in self.target["tags"]]


class CategoryMapping(Mapping):
    @classmethod
    def definition(cls):
        return {
            "id": {"type": "long"},
            "name": {"type": "text"},
        }


# ============================================================
# fixtures
# ============================================================


@pytest.fixture
def make_cluster():
    """创建内存集群的工厂."""

    def factory(address: str, role: ClusterRole = ClusterRole.CRITICAL) -> InMemoryCluster:
        return InMemoryCluster(address, role)

    return factory


@pytest.fixture
def primary(make_cluster) -> InMemoryCluster:
    """关键集群."""
    return make_cluster("primary:9200")


@pytest.fixture
def backup(make_cluster) -> InMemoryCluster:
    """可丢弃集群."""
    return make_cluster("backup:9200", ClusterRole.DISPENSABLE)


@pytest.fixture
def notifier() -> CollectingErrorNotifier:
    """收集通知的通知器."""
    return CollectingErrorNotifier()


@pytest.fixture
def fanout(primary, backup, notifier) -> ClusterFanout:
    """一个关键集群 + 一个可丢弃集群的扇出."""
    return ClusterFanout([primary], [backup], notifier)


@pytest.fixture
def clock() -> SteppingClock:
    """从 2013-05-14 12:46:08 开始的时钟."""
    return SteppingClock(datetime(2013, 5, 14, 12, 46, 8))


@pytest.fixture
def registry() -> MappingRegistry:
    """注册了 product / category 两种文档类型的 products 索引族."""
    return (
        MappingRegistry()
        .register("products", "product", ProductMapping)
        .register("products", "category", CategoryMapping)
    )
