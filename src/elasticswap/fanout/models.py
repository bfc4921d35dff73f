"""多集群扇出数据模型定义模块."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .exceptions import UnsupportedOperationError


class Operation(Enum):
    """可扇出的操作枚举.

    枚举值即集群客户端上对应的方法名。
    """

    CREATE_INDEX = "create_index"
    REFRESH_INDEX = "refresh_index"
    CLOSE_INDEX = "close_index"
    DELETE_INDEX = "delete_index"
    STORE_DOCUMENT = "store_document"
    BULK_STORE = "bulk_store"
    UPDATE_DOCUMENT = "update_document"
    DELETE_DOCUMENT = "delete_document"
    ASSIGN_ALIAS = "assign_alias"
    UNASSIGN_ALIAS = "unassign_alias"
    SET_ALIAS = "set_alias"
    RESOLVE_ALIAS = "resolve_alias"
    LIST_GENERATIONS = "list_generations"
    SEARCH = "search"


@dataclass
class OperationCall:
    """一次扇出调用的描述.

    Attributes:
        operation: 操作类型
        args: 位置参数
        kwargs: 关键字参数
    """

    operation: Operation
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, operation: "Operation | str", *args: Any, **kwargs: Any) -> "OperationCall":
        """构建调用描述，operation 可以是枚举或方法名.

        Raises:
            UnsupportedOperationError: 操作名称未定义时抛出
        """
        if not isinstance(operation, Operation):
            try:
                operation = Operation(operation)
            except ValueError:
                raise UnsupportedOperationError(
                    f"不支持的操作: {operation!r}"
                ) from None
        return cls(operation=operation, args=args, kwargs=kwargs)

    def describe(self) -> str:
        params = [repr(arg) for arg in self.args]
        params.extend(f"{key}={value!r}" for key, value in self.kwargs.items())
        return f"{self.operation.value}({', '.join(params)})"
