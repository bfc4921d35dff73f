"""索引生命周期核心工具类."""

import logging
import os
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any

from ..cluster import IndexAlreadyExistsError, IndexNotFoundError
from ..fanout import ClusterFanout
from ..mapping import IndexFamily
from ..results import QueryResultView
from ..typing import QueryBody
from .exceptions import GenerationNotFoundError
from .models import (
    CleanupResult,
    LifecycleConfig,
    LifecycleState,
    RebuildOptions,
    SourceFeed,
)
from .utils import (
    IMPORTING_ALIAS_SUFFIX,
    build_alias,
    build_settings,
    generation_name,
    generations_of,
)

logger = logging.getLogger(__name__)


class IndexLifecycle:
    """索引族生命周期管理类.

    索引以带时间戳的代次创建，例如别名为 "products_production" 时创建
    "products_production_20130514124608"，查询与写入都通过别名进行。
    重建时在后台创建并导入新代次，完成后再切换别名，从而实现无停机重建：

    1. create(): 创建新代次
    2. import_begin(): 为新代次挂上 "<别名>_importing" 导入别名
    3. import_documents(): 分批导入数据源中的全部记录
    4. switch_alias(): 将对外别名切换到新代次，并移除导入别名
    5. cleanup_old_indices(): 删除过旧的代次，关闭上一代

    store / bulk_store / delete_by_id 在每次写入时重新解析对外别名，写入别名
    当前指向的代次；导入期间再把同样的写入重放到导入中的代次（双写），使新代次
    与实时写入保持一致。对外别名与导入别名都不缓存，长期存活的实例在其他实例
    切换别名之后，写入仍会进入读方可见的代次。

    同一别名的多个重建不能同时进行，需要由调用方串行化。

    Args:
        family: 索引族（来自 MappingRegistry）
        fanout: 多集群扇出
        config: 生命周期配置
        source: 导入使用的数据源，子类也可以直接重写 import_documents
        clock: 生成代次时间戳的时钟，默认 datetime.now
        environ: 计算别名后缀使用的环境变量，默认 os.environ

    Example:
        >>> lifecycle = IndexLifecycle(registry.family("products"), fanout)
        >>> lifecycle.create_import_and_switch()
        >>> lifecycle.store({"product": product})
    """

    def __init__(
        self,
        family: IndexFamily,
        fanout: ClusterFanout,
        config: LifecycleConfig | None = None,
        source: SourceFeed | None = None,
        clock: Callable[[], datetime] | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self.family = family
        self.config = config or LifecycleConfig()
        self.source = source
        self._fanout = fanout
        self._clock = clock or datetime.now

        self.alias = build_alias(
            family.name, self.config, os.environ if environ is None else environ
        )
        self.importing_alias = self.alias + IMPORTING_ALIAS_SUFFIX

        # generation 为 None 表示 ES 中还没有该别名指向的索引
        self.generation: str | None = self._fanout.resolve_alias(self.alias)
        self.state = LifecycleState.LIVE if self.generation else LifecycleState.ABSENT
        logger.info(
            f"初始化索引生命周期: 别名 '{self.alias}' -> {self.generation!r} "
            f"({self.state.value})"
        )

    # ==================== 状态查询 ====================

    def index_being_imported(self) -> str | None:
        """当前导入中的代次，没有导入时返回 None."""
        return self._fanout.resolve_alias(self.importing_alias)

    def index_importing(self) -> bool:
        return self.index_being_imported() is not None

    def _require_generation(self) -> str:
        if self.generation is None:
            raise GenerationNotFoundError(
                f"别名 '{self.alias}' 未指向任何索引，请先调用 create()"
            )
        return self.generation

    def live_generation(self) -> str:
        """写入时对外别名指向的代次.

        别名尚未分配时（例如首次 create 之后、switch_alias 之前）退回到本实例的代次。

        Raises:
            GenerationNotFoundError: 别名未分配且本实例没有代次时抛出
        """
        live = self._fanout.resolve_alias(self.alias)
        if live is not None:
            return live
        return self._require_generation()

    def _settle_state(self) -> None:
        self.state = LifecycleState.LIVE if self.generation else LifecycleState.ABSENT

    # ==================== 索引管理 ====================

    def mapping_definition(self) -> dict[str, Any]:
        return self.family.mapping_definition()

    def settings_definition(self) -> dict[str, Any]:
        return build_settings(self.config, self.family.name)

    def create(self) -> str:
        """创建新的索引代次.

        Returns:
            新代次名称

        Raises:
            IndexAlreadyExistsError: 同名代次已存在时抛出（关键集群）
            CreateFailedError: 关键集群创建失败时抛出
        """
        self.generation = generation_name(self.alias, self._clock())
        self._fanout.create_index(
            self.generation,
            mappings=self.mapping_definition(),
            settings=self.settings_definition(),
        )
        self.state = LifecycleState.CREATED
        logger.info(f"'{self.alias}': 创建代次 '{self.generation}'")
        return self.generation

    def delete(self) -> None:
        """删除当前代次，没有代次时什么也不做.

        Raises:
            IndexNotFoundError: 代次在 ES 中已不存在时抛出
        """
        if self.generation is None:
            return
        self._fanout.delete_index(self.generation)
        logger.info(f"'{self.alias}': 删除代次 '{self.generation}'")
        self.generation = None
        self.state = LifecycleState.ABSENT

    def refresh(self) -> None:
        self._fanout.refresh_index(self._require_generation())

    def import_begin(self) -> None:
        """将导入别名指向当前代次，开始双写."""
        generation = self._require_generation()
        self._fanout.set_alias(self.importing_alias, generation)
        self.state = LifecycleState.IMPORTING
        logger.info(f"'{self.alias}': 开始导入代次 '{generation}'")

    def import_documents(self) -> None:
        """从数据源分批导入全部记录.

        导入直接写入本实例的代次（即导入中的代次），不经过对外别名。
        没有配置数据源时，子类需要重写该方法。

        Raises:
            NotImplementedError: 未配置数据源且未被重写时抛出
        """
        if self.source is None:
            raise NotImplementedError(
                f"{type(self).__name__} 没有配置数据源，请传入 source 或重写 import_documents()"
            )

        generation = self._require_generation()
        document_type = self.source.document_type
        total = 0
        for batch in self.source.batches():
            if not batch:
                continue
            documents = [self.family.document_for(document_type, t) for t in batch]
            self._fanout.bulk_store(generation, document_type, documents)
            total += len(batch)
            logger.info(
                f"'{self.alias}': 已导入 {total} 个 {document_type} 文档 "
                f"(本批 {len(batch)} 个)"
            )

    def switch_alias(self) -> None:
        """将对外别名切换到当前代次.

        这是唯一对读方可见的切换点：切换提交前读方看到旧代次，之后看到新代次。
        切换后若存在导入中的代次，则移除其导入别名，结束双写。
        """
        generation = self._require_generation()
        self._fanout.set_alias(self.alias, generation)

        importing = self.index_being_imported()
        if importing is not None:
            self._fanout.unassign_alias(importing, self.importing_alias)

        self.state = LifecycleState.LIVE
        logger.info(f"'{self.alias}': 别名已切换到 '{generation}'")

    def cleanup_old_indices(self) -> CleanupResult:
        """清理旧代次.

        按名称排序后保留最新的两个代次，删除其余代次，并关闭（不删除）
        两个保留代次中较旧的一个，作为可恢复的缓冲。当前被对外别名或
        导入别名引用的代次永远不会被删除或关闭。

        Returns:
            清理结果
        """
        self.state = LifecycleState.RETIRING
        try:
            result = self._retire_generations()
        finally:
            self._settle_state()

        logger.info(
            f"'{self.alias}': 清理完成，删除 {result.deleted}，关闭 {result.closed!r}"
        )
        return result

    def _retire_generations(self) -> CleanupResult:
        generations = generations_of(self.alias, self._fanout.list_generations())
        protected = {
            name
            for name in (self._fanout.resolve_alias(self.alias), self.index_being_imported())
            if name
        }

        retained = generations[-2:]
        result = CleanupResult(retained=list(retained))

        for name in generations[:-2]:
            if name in protected:
                logger.warning(f"'{self.alias}': 代次 '{name}' 仍被别名引用，跳过删除")
                result.skipped.append(name)
                continue
            self._fanout.delete_index(name)
            result.deleted.append(name)

        # 只有一个代次时不关闭
        if len(retained) > 1:
            previous = retained[0]
            if previous in protected:
                logger.warning(f"'{self.alias}': 代次 '{previous}' 仍被别名引用，跳过关闭")
                result.skipped.append(previous)
            else:
                self._fanout.close_index(previous)
                result.closed = previous
        return result

    def create_import_and_switch(self, cleanup: bool = True) -> str:
        """完整的无停机重建流程.

        Args:
            cleanup: 切换后是否清理旧代次，默认 True

        Returns:
            新代次名称
        """
        generation = self.create()
        self.import_begin()
        self.import_documents()
        self.switch_alias()
        if cleanup:
            self.cleanup_old_indices()
        return generation

    def rebuild(self, options: RebuildOptions | None = None) -> str:
        """强制删除并重建当前代次.

        主要用于测试等非生产场景：不关心旧数据，尽一切可能完成删除与创建。
        创建时遇到 "索引已存在" 会再删除并创建一次；删除时遇到 "索引不存在"
        则直接创建。其他异常原样抛出。

        Args:
            options: 重建选项

        Returns:
            新代次名称
        """
        options = options or RebuildOptions()
        try:
            self.delete()
            self.create()
        except IndexAlreadyExistsError:
            logger.warning(f"'{self.alias}': 代次 '{self.generation}' 已存在，重试删除与创建")
            self.delete()
            self.create()
        except IndexNotFoundError:
            logger.warning(f"'{self.alias}': 代次 '{self.generation}' 不存在，直接创建")
            self.create()

        if options.switch_alias:
            self.switch_alias()

        if options.import_documents:
            self.import_documents()
            self.refresh()

        return self._require_generation()

    # ==================== 文档写入 ====================

    def _dual_write(self, write: Callable[[str], Any]) -> Any:
        target = self.live_generation()
        result = write(target)

        importing = self.index_being_imported()
        if importing is not None and importing != target:
            write(importing)
        return result

    def store(self, records: Mapping[str, Any]) -> None:
        """写入文档.

        Args:
            records: {文档类型: 领域对象}，例如 {"product": product}
        """
        for document_type, target in records.items():
            document = self.family.document_for(document_type, target)
            self._dual_write(
                lambda index_name: self._fanout.store_document(
                    index_name, document_type, document
                )
            )

    def store_and_refresh(self, records: Mapping[str, Any]) -> None:
        self.store(records)
        self._fanout.refresh_index(self.live_generation())

    def bulk_store(self, records: Mapping[str, Iterable[Any]]) -> None:
        """批量写入文档.

        Args:
            records: {文档类型: 领域对象列表}，例如 {"product": products}
        """
        for document_type, targets in records.items():
            documents = [self.family.document_for(document_type, t) for t in targets]
            if not documents:
                continue
            self._dual_write(
                lambda index_name: self._fanout.bulk_store(
                    index_name, document_type, documents
                )
            )

    def delete_by_id(self, ids: Mapping[str, Any]) -> None:
        """按 ID 删除文档，文档不存在视为成功.

        Args:
            ids: {文档类型: 文档 ID}，例如 {"product": 1234}
        """
        for document_type, doc_id in ids.items():
            self._dual_write(
                lambda index_name: self._fanout.delete_document(
                    index_name, document_type, doc_id
                )
            )

    # ==================== 查询 ====================

    def search(self, query: QueryBody) -> QueryResultView:
        return QueryResultView.fetch(self._fanout.primary, self.alias, query)
