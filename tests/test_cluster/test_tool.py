"""ClusterClient 单元测试."""

from unittest.mock import MagicMock, call

import pytest
from elasticsearch.exceptions import ApiError, BadRequestError, NotFoundError
from elasticsearch.exceptions import ConnectionError as ESConnectionError

from elasticswap.cluster import (
    BulkStoreFailedError,
    ClusterClient,
    ClusterRequestError,
    CreateFailedError,
    IndexAlreadyExistsError,
    IndexNotFoundError,
    InvalidDocumentError,
    StoreFailedError,
    TransportFailureError,
    UpdateFailedError,
    document_id,
)
from elasticswap.connection import ClusterConfig, ClusterRole, ConnectionConfig


def api_error(cls, status: int, error_type: str):
    """构造带响应体的 ES ApiError."""
    return cls(
        message=error_type,
        meta=MagicMock(status=status),
        body={"error": {"type": error_type, "reason": error_type}},
    )


# ============================================================
# 辅助 fixtures
# ============================================================


@pytest.fixture
def es_client() -> MagicMock:
    """模拟 ES 客户端."""
    client = MagicMock()
    client.indices = MagicMock()
    return client


@pytest.fixture
def pool(es_client) -> MagicMock:
    """模拟连接池."""
    pool = MagicMock()
    pool.get_client.return_value = es_client
    pool.connection_config = ConnectionConfig()
    return pool


@pytest.fixture
def client(pool) -> ClusterClient:
    """8.x 集群客户端."""
    return ClusterClient(ClusterConfig(host="es-1"), pool)


@pytest.fixture
def legacy_client(pool) -> ClusterClient:
    """1.x 集群客户端."""
    return ClusterClient(ClusterConfig(host="es-legacy", policy="1.x"), pool)


INDEX = "products_test_20130514124608"


# ============================================================
# 基础属性
# ============================================================


class TestClusterClientInit:
    """ClusterClient 初始化测试."""

    def test_properties(self, client, pool) -> None:
        """测试地址、角色与策略."""
        assert client.address == "es-1:9200"
        assert client.role == ClusterRole.CRITICAL
        assert client.policy.name == "8.x"
        pool.get_client.assert_called_once_with(client.config)

    def test_repr(self, client) -> None:
        """测试 repr 包含地址与角色."""
        assert repr(client) == "ClusterClient(es-1:9200, role=critical)"


class TestDocumentId:
    """document_id 函数测试."""

    def test_reads_id(self) -> None:
        """测试读取 id."""
        assert document_id({"id": 7}) == 7

    def test_falls_back_to_underscore_id(self) -> None:
        """测试读取 _id."""
        assert document_id({"_id": "abc"}) == "abc"

    def test_missing(self) -> None:
        """测试缺少 id 返回 None."""
        assert document_id({"title": "x"}) is None


# ============================================================
# 索引管理
# ============================================================


class TestCreateIndex:
    """create_index 测试."""

    def test_create_success(self, client, es_client) -> None:
        """测试创建成功."""
        es_client.indices.create.return_value = {"acknowledged": True}
        mappings = {"properties": {"id": {"type": "long"}}}
        settings = {"number_of_shards": 1}

        response = client.create_index(INDEX, mappings=mappings, settings=settings)

        assert response == {"acknowledged": True}
        es_client.indices.create.assert_called_once_with(
            index=INDEX, mappings=mappings, settings=settings
        )

    def test_create_without_definitions(self, client, es_client) -> None:
        """测试不传定义时只发送索引名."""
        es_client.indices.create.return_value = {"acknowledged": True}
        client.create_index(INDEX)
        es_client.indices.create.assert_called_once_with(index=INDEX)

    def test_create_not_acknowledged(self, client, es_client) -> None:
        """测试未确认时抛出 CreateFailedError."""
        es_client.indices.create.return_value = {"acknowledged": False}
        with pytest.raises(CreateFailedError) as exc_info:
            client.create_index(INDEX)
        assert exc_info.value.cluster == "es-1:9200"
        assert exc_info.value.response == {"acknowledged": False}

    def test_create_already_exists(self, client, es_client) -> None:
        """测试索引已存在时抛出 IndexAlreadyExistsError."""
        es_client.indices.create.side_effect = api_error(
            BadRequestError, 400, "resource_already_exists_exception"
        )
        with pytest.raises(IndexAlreadyExistsError) as exc_info:
            client.create_index(INDEX)
        assert exc_info.value.index_name == INDEX
        assert exc_info.value.status == 400

    def test_create_other_api_error(self, client, es_client) -> None:
        """测试其他请求错误抛出 ClusterRequestError."""
        es_client.indices.create.side_effect = api_error(
            BadRequestError, 400, "mapper_parsing_exception"
        )
        with pytest.raises(ClusterRequestError) as exc_info:
            client.create_index(INDEX)
        assert not isinstance(exc_info.value, IndexAlreadyExistsError)


class TestIndexOperations:
    """refresh / close / delete 测试."""

    def test_refresh(self, client, es_client) -> None:
        """测试刷新索引."""
        client.refresh_index(INDEX)
        es_client.indices.refresh.assert_called_once_with(index=INDEX)

    def test_close(self, client, es_client) -> None:
        """测试关闭索引."""
        client.close_index(INDEX)
        es_client.indices.close.assert_called_once_with(index=INDEX)

    def test_delete(self, client, es_client) -> None:
        """测试删除索引."""
        client.delete_index(INDEX)
        es_client.indices.delete.assert_called_once_with(index=INDEX)

    def test_delete_missing_index(self, client, es_client) -> None:
        """测试删除不存在的索引抛出 IndexNotFoundError."""
        es_client.indices.delete.side_effect = api_error(
            NotFoundError, 404, "index_not_found_exception"
        )
        with pytest.raises(IndexNotFoundError) as exc_info:
            client.delete_index(INDEX)
        assert exc_info.value.status == 404
        assert exc_info.value.cluster == "es-1:9200"

    def test_transport_failure(self, client, es_client) -> None:
        """测试传输层错误转换为 TransportFailureError."""
        es_client.indices.refresh.side_effect = ESConnectionError("connection refused")
        with pytest.raises(TransportFailureError) as exc_info:
            client.refresh_index(INDEX)
        assert exc_info.value.index_name == INDEX


# ============================================================
# 文档写入
# ============================================================


class TestStoreDocument:
    """store_document 测试."""

    def test_store_success(self, client, es_client) -> None:
        """测试写入成功."""
        es_client.index.return_value = {"result": "created"}
        document = {"type": "product", "id": 1, "title": "Lamp"}

        client.store_document(INDEX, "product", document)

        es_client.index.assert_called_once_with(index=INDEX, id=1, document=document)

    def test_store_rejected(self, client, es_client) -> None:
        """测试策略判定失败时抛出 StoreFailedError."""
        es_client.index.return_value = {"result": "noop"}
        document = {"id": 1}
        with pytest.raises(StoreFailedError) as exc_info:
            client.store_document(INDEX, "product", document)
        assert exc_info.value.doc_id == 1
        assert exc_info.value.document == document
        assert "可以单独重放" in str(exc_info.value)

    def test_store_legacy_policy(self, legacy_client, es_client) -> None:
        """测试 1.x 策略下写入总是成功."""
        es_client.index.return_value = {"created": False}
        legacy_client.store_document(INDEX, "product", {"id": 1})

    def test_store_missing_id(self, client, es_client) -> None:
        """测试缺少 id 时不发送请求."""
        with pytest.raises(InvalidDocumentError):
            client.store_document(INDEX, "product", {"title": "Lamp"})
        es_client.index.assert_not_called()

    def test_store_missing_index(self, client, es_client) -> None:
        """测试索引不存在时抛出 IndexNotFoundError."""
        es_client.index.side_effect = api_error(NotFoundError, 404, "index_not_found_exception")
        with pytest.raises(IndexNotFoundError):
            client.store_document(INDEX, "product", {"id": 1})


class TestBulkStore:
    """bulk_store 测试."""

    def test_bulk_success(self, client, es_client) -> None:
        """测试批量写入成功，一次请求写入全部文档."""
        es_client.bulk.return_value = {
            "errors": False,
            "items": [{"index": {"_id": "1", "status": 201}}, {"index": {"_id": "2", "status": 200}}],
        }
        documents = [{"id": 1}, {"id": 2}]

        client.bulk_store(INDEX, "product", documents)

        es_client.bulk.assert_called_once_with(
            operations=[
                {"index": {"_index": INDEX, "_id": 1}},
                {"id": 1},
                {"index": {"_index": INDEX, "_id": 2}},
                {"id": 2},
            ]
        )

    def test_bulk_empty(self, client, es_client) -> None:
        """测试空列表不发送请求."""
        assert client.bulk_store(INDEX, "product", []) == {"items": [], "errors": False}
        es_client.bulk.assert_not_called()

    def test_bulk_partial_failure(self, client, es_client) -> None:
        """测试部分失败时汇总全部失败条目."""
        es_client.bulk.return_value = {
            "errors": True,
            "items": [
                {"index": {"_id": "1", "status": 201}},
                {
                    "index": {
                        "_index": INDEX,
                        "_id": "2",
                        "status": 404,
                        "error": {"type": "index_not_found_exception", "reason": "no such index"},
                    }
                },
                {"index": {"_id": "3", "status": 201}},
                {"index": {"_id": "4", "status": 429, "error": {"type": "es_rejected_execution_exception"}}},
            ],
        }
        documents = [{"id": i} for i in range(1, 5)]

        with pytest.raises(BulkStoreFailedError) as exc_info:
            client.bulk_store(INDEX, "product", documents)

        error = exc_info.value
        assert error.failed_ids == ["2", "4"]
        assert [f.position for f in error.failures] == [2, 4]
        assert error.failures[0].status == 404
        assert error.failures[0].error_type == "index_not_found_exception"
        assert "2/4" in str(error)

    def test_bulk_missing_id(self, client, es_client) -> None:
        """测试存在缺少 id 的文档时不发送请求."""
        with pytest.raises(InvalidDocumentError):
            client.bulk_store(INDEX, "product", [{"id": 1}, {"title": "x"}])
        es_client.bulk.assert_not_called()


class TestUpdateDocument:
    """update_document 测试."""

    @pytest.mark.parametrize("result", ["updated", "noop"])
    def test_update_success(self, client, es_client, result) -> None:
        """测试 updated / noop 视为成功."""
        es_client.update.return_value = {"result": result}
        client.update_document(INDEX, "product", 1, {"title": "Desk"})
        es_client.update.assert_called_once_with(index=INDEX, id=1, doc={"title": "Desk"})

    def test_update_rejected(self, client, es_client) -> None:
        """测试策略判定失败时抛出 UpdateFailedError."""
        es_client.update.return_value = {}
        with pytest.raises(UpdateFailedError) as exc_info:
            client.update_document(INDEX, "product", 1, {"title": "Desk"})
        assert exc_info.value.doc_id == 1


class TestDeleteDocument:
    """delete_document 测试."""

    def test_delete_success(self, client, es_client) -> None:
        """测试删除成功."""
        es_client.delete.return_value = {"result": "deleted"}
        assert client.delete_document(INDEX, "product", 1) == {"result": "deleted"}
        es_client.delete.assert_called_once_with(index=INDEX, id=1)

    def test_delete_not_found_is_success(self, client, es_client) -> None:
        """测试文档不存在视为删除成功."""
        es_client.delete.side_effect = api_error(NotFoundError, 404, "not_found")
        assert client.delete_document(INDEX, "product", 1) is None

    def test_delete_other_error_propagates(self, client, es_client) -> None:
        """测试其他错误原样抛出."""
        es_client.delete.side_effect = api_error(ApiError, 500, "internal_error")
        with pytest.raises(ClusterRequestError) as exc_info:
            client.delete_document(INDEX, "product", 1)
        assert exc_info.value.status == 500


# ============================================================
# 别名管理
# ============================================================


class TestAliases:
    """别名管理测试."""

    def test_assign_and_unassign(self, client, es_client) -> None:
        """测试添加与移除别名."""
        client.assign_alias(INDEX, "products_test")
        client.unassign_alias(INDEX, "products_test")
        es_client.indices.put_alias.assert_called_once_with(index=INDEX, name="products_test")
        es_client.indices.delete_alias.assert_called_once_with(
            index=INDEX, name="products_test"
        )

    def test_indices_for_missing_alias(self, client, es_client) -> None:
        """测试别名不存在时返回空列表."""
        es_client.indices.exists_alias.return_value = False
        assert client.indices_for_alias("products_test") == []
        es_client.indices.get_alias.assert_not_called()

    def test_set_alias_assigns_before_unassigning(self, client, es_client) -> None:
        """测试先添加新别名再移除旧别名."""
        es_client.indices.exists_alias.return_value = True
        es_client.indices.get_alias.return_value = {
            "products_test_20130101000000": {"aliases": {"products_test": {}}},
        }

        client.set_alias("products_test", INDEX)

        assert es_client.indices.method_calls[-2:] == [
            call.put_alias(index=INDEX, name="products_test"),
            call.delete_alias(index="products_test_20130101000000", name="products_test"),
        ]

    def test_set_alias_same_index(self, client, es_client) -> None:
        """测试别名已指向目标索引时不移除."""
        es_client.indices.exists_alias.return_value = True
        es_client.indices.get_alias.return_value = {INDEX: {"aliases": {"products_test": {}}}}

        client.set_alias("products_test", INDEX)

        es_client.indices.delete_alias.assert_not_called()

    def test_set_alias_partial_failure_keeps_alias(self, client, es_client) -> None:
        """测试移除旧别名失败时，新索引已经持有别名."""
        es_client.indices.exists_alias.return_value = True
        es_client.indices.get_alias.return_value = {
            "products_test_20130101000000": {"aliases": {"products_test": {}}},
        }
        es_client.indices.delete_alias.side_effect = ESConnectionError("timeout")

        with pytest.raises(TransportFailureError):
            client.set_alias("products_test", INDEX)
        es_client.indices.put_alias.assert_called_once_with(index=INDEX, name="products_test")

    def test_resolve_alias(self, client, es_client) -> None:
        """测试解析别名（包括已关闭的索引）."""
        es_client.indices.get_alias.return_value = {
            "products_test_20130101000000": {"aliases": {}},
            INDEX: {"aliases": {"products_test": {}}},
        }

        assert client.resolve_alias("products_test") == INDEX
        es_client.indices.get_alias.assert_called_once_with(
            index="*", expand_wildcards=["open", "closed"]
        )

    def test_resolve_missing_alias(self, client, es_client) -> None:
        """测试别名不存在返回 None."""
        es_client.indices.get_alias.return_value = {INDEX: {"aliases": {}}}
        assert client.resolve_alias("products_test") is None

    def test_list_generations(self, client, es_client) -> None:
        """测试列出全部索引."""
        es_client.indices.get_alias.return_value = {
            "products_test_20130101000000": {"aliases": {}},
            INDEX: {"aliases": {"products_test": {}}},
        }
        assert client.list_generations() == {"products_test_20130101000000", INDEX}


# ============================================================
# 查询
# ============================================================


class TestSearch:
    """search 测试."""

    def test_search_forwards_query(self, client, es_client) -> None:
        """测试查询体原样转发."""
        es_client.search.return_value = {"took": 3, "hits": {"total": 0, "hits": []}}
        query = {"query": {"match_all": {}}, "from": 0, "size": 10}

        results = client.search("products_test", query)

        assert results["took"] == 3
        es_client.search.assert_called_once_with(index="products_test", body=query)

    def test_search_missing_index(self, client, es_client) -> None:
        """测试查询不存在的索引抛出 IndexNotFoundError."""
        es_client.search.side_effect = api_error(NotFoundError, 404, "index_not_found_exception")
        with pytest.raises(IndexNotFoundError):
            client.search("products_test", {})
