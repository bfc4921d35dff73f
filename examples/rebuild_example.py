"""索引代次管理使用示例.

本文件展示了如何使用 IndexLifecycle 在多个集群上无停机重建索引，
以及重建期间的实时写入与查询。
"""

import logging
from dataclasses import dataclass, field

from elasticswap import (
    ClusterFanout,
    ConnectionPool,
    IndexLifecycle,
    IterableSource,
    LifecycleConfig,
    Mapping,
    MappingRegistry,
    RebuildOptions,
    load_clusters,
    mapping_field,
)
from elasticswap.fanout import CollectingErrorNotifier

logging.basicConfig(level=logging.INFO)

# 集群配置：primary 为关键集群，backup 为可丢弃集群
SETTINGS = {
    "clusters": {
        "primary": {"host": "localhost", "port": 9200, "policy": "8.x"},
        "backup": {"host": "localhost", "port": 9201},
    },
    "critical_clusters": ["primary"],
    "dispensable_clusters": ["backup"],
}


@dataclass
class Product:
    id: int
    title: str
    price_in_cents: int
    tags: list = field(default_factory=list)


PRODUCTS = [
    Product(1, "Desk lamp", 1999, ["Lighting"]),
    Product(2, "Standing desk", 34900, ["Furniture", "Office"]),
    Product(3, "Office chair", 15900, ["Furniture"]),
]


class ProductMapping(Mapping):
    @classmethod
    def definition(cls):
        return {
            "id": {"type": "long"},
            "title": {"type": "text", "analyzer": "light_english"},
            "price": {"type": "float"},
            "tags": {"type": "keyword"},
        }

    @mapping_field("price")
    def price(self):
        return self.target.price_in_cents / 100

    @mapping_field("tags")
    def tags(self):
        return [tag.lower() for tag in self.target.tags]


# 启动时注册全部文档类型，错误的注册在这里就会失败
registry = MappingRegistry().register("products", "product", ProductMapping)

pool = ConnectionPool()
notifier = CollectingErrorNotifier()
fanout = ClusterFanout.from_clusters(load_clusters(SETTINGS), pool, notifier)
config = LifecycleConfig(environment="development", number_of_shards={"default": 1})


# ==================== 示例1：无停机重建 ====================
def example_create_import_and_switch():
    """创建新代次、导入、切换别名并清理旧代次."""
    lifecycle = IndexLifecycle(
        registry.family("products"),
        fanout,
        config,
        source=IterableSource("product", PRODUCTS, batch_size=2),
    )
    generation = lifecycle.create_import_and_switch()
    print(f"别名 {lifecycle.alias} 已指向 {generation}")
    return lifecycle


# ==================== 示例2：实时写入 ====================
def example_live_writes():
    """实时写入通过别名解析当前代次，重建期间自动双写."""
    lifecycle = IndexLifecycle(registry.family("products"), fanout, config)
    lifecycle.store({"product": Product(4, "Monitor arm", 4500, ["Office"])})
    lifecycle.bulk_store({"product": PRODUCTS[:2]})
    lifecycle.delete_by_id({"product": 3})
    lifecycle.refresh()


# ==================== 示例3：查询与分页 ====================
def example_search():
    """查询并读取分页信息."""
    lifecycle = IndexLifecycle(registry.family("products"), fanout, config)
    view = lifecycle.search({"query": {"match": {"title": "desk"}}, "from": 0, "size": 2})

    print(f"共 {view.total_entries} 条，第 {view.current_page}/{view.total_pages} 页")
    for hit in view.iter_sources():
        print(f"  {hit._id}: {hit.title} ({hit.price})")


# ==================== 示例4：强制重建 ====================
def example_rebuild():
    """测试环境中强制删除并重建索引."""
    lifecycle = IndexLifecycle(
        registry.family("products"),
        fanout,
        config,
        source=IterableSource("product", PRODUCTS),
    )
    lifecycle.rebuild(RebuildOptions(import_documents=True))


def main():
    """运行所有示例."""
    with pool:
        example_create_import_and_switch()
        example_live_writes()
        example_search()
        example_rebuild()

    # 可丢弃集群上的失败不会中断流程，在这里汇总
    for error, context in notifier.notifications:
        print(f"可丢弃集群 {context['cluster']} 失败: {context['call']}: {error}")


if __name__ == "__main__":
    main()
