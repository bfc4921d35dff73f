"""可丢弃集群错误通知."""

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class ErrorNotifier(Protocol):
    """错误通知接口.

    接收可丢弃集群上的失败，用于带外告警。通知结果不影响控制流。
    """

    def notify(self, error: BaseException, context: dict[str, Any]) -> None: ...


class LoggingErrorNotifier:
    """默认通知器：只写日志."""

    def notify(self, error: BaseException, context: dict[str, Any]) -> None:
        logger.error(
            f"可丢弃集群错误通知: {type(error).__name__}: {error} (上下文: {context})"
        )


class CollectingErrorNotifier:
    """收集通知的通知器，便于在脚本中汇总失败."""

    def __init__(self) -> None:
        self.notifications: list[tuple[BaseException, dict[str, Any]]] = []

    def notify(self, error: BaseException, context: dict[str, Any]) -> None:
        self.notifications.append((error, context))
