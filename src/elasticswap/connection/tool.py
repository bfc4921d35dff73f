"""ES 连接池工具模块.

提供 ConnectionPool 类，统一管理 Elasticsearch 客户端的创建、缓存与关闭。
同一个 (host, port) 在连接池生命周期内始终返回同一个客户端实例，
以复用持久 HTTP 连接。

使用示例:
    from elasticswap.connection import ConnectionPool, ClusterConfig

    with ConnectionPool() as pool:
        client = pool.get_client(ClusterConfig(host="localhost"))
"""

from __future__ import annotations

import logging
import threading

from elasticsearch import Elasticsearch

from .models import ClusterConfig, ConnectionConfig

logger = logging.getLogger(__name__)


def _connection_options(cluster_config: ClusterConfig) -> tuple:
    # 影响客户端行为的选项，name / role / policy 不在其中
    return (
        cluster_config.scheme,
        cluster_config.username,
        cluster_config.password,
        cluster_config.api_key,
        cluster_config.bearer_token,
        cluster_config.ca_certs,
        cluster_config.verify_certs,
    )


class ConnectionPool:
    """Elasticsearch 连接池.

    在启动时构造一次，以引用的方式传给所有需要访问集群的组件，
    不使用进程级单例。客户端惰性创建，创建过程由锁保护，可被多线程并发调用。

    Attributes:
        _connection_config: 连接池配置
        _clients: 以 (host, port) 为键缓存的客户端字典
        _options: 创建各客户端时使用的连接选项，用于发现同一地址的配置冲突
        _lock: 保护客户端创建的锁

    Examples:
        >>> pool = ConnectionPool(ConnectionConfig(request_timeout=30))
        >>> client = pool.get_client(ClusterConfig(host="localhost"))
    """

    def __init__(self, connection_config: ConnectionConfig | None = None) -> None:
        """初始化连接池.

        Args:
            connection_config: 连接池配置，默认使用 ConnectionConfig 的默认值
        """
        self._connection_config = connection_config or ConnectionConfig()
        self._clients: dict[tuple[str, int], Elasticsearch] = {}
        self._options: dict[tuple[str, int], tuple] = {}
        self._lock = threading.Lock()

    @property
    def connection_config(self) -> ConnectionConfig:
        return self._connection_config

    def _create_client(self, cluster_config: ClusterConfig) -> Elasticsearch:
        """根据集群配置创建 Elasticsearch 客户端实例.

        只使用单个节点地址：多节点轮询在生产环境中表现不稳定，
        高可用交由多集群扇出实现。

        Args:
            cluster_config: 单个集群的配置信息

        Returns:
            Elasticsearch 客户端实例
        """
        kwargs: dict = {
            "hosts": [cluster_config.url],
            "max_retries": self._connection_config.max_retries,
            "retry_on_timeout": self._connection_config.retry_on_timeout,
            "request_timeout": self._connection_config.request_timeout,
            "http_compress": self._connection_config.http_compress,
        }

        # Basic Auth 认证
        if cluster_config.username and cluster_config.password:
            kwargs["basic_auth"] = (
                cluster_config.username,
                cluster_config.password,
            )

        # API Key 认证
        if cluster_config.api_key:
            kwargs["api_key"] = cluster_config.api_key

        # Bearer Token 认证
        if cluster_config.bearer_token:
            kwargs["bearer_auth"] = cluster_config.bearer_token

        # SSL/TLS 配置
        if cluster_config.ca_certs:
            kwargs["ca_certs"] = cluster_config.ca_certs
        kwargs["verify_certs"] = cluster_config.verify_certs

        logger.info(f"创建 ES 客户端: {cluster_config.url}")
        return Elasticsearch(**kwargs)

    def get_client(self, cluster_config: ClusterConfig) -> Elasticsearch:
        """获取集群对应的客户端.

        以 (host, port) 为键惰性创建并缓存客户端。同一地址只会创建一次，
        后续调用（包括并发调用）均返回同一个实例。同一地址以不同的协议、
        认证或证书选项再次请求时，仍返回已缓存的客户端，并记录告警。

        Args:
            cluster_config: 集群配置

        Returns:
            Elasticsearch 客户端实例
        """
        key = (cluster_config.host, cluster_config.port)
        options = _connection_options(cluster_config)
        client = self._clients.get(key)
        if client is None:
            with self._lock:
                # 双重检查，避免并发时重复创建
                if key not in self._clients:
                    self._clients[key] = self._create_client(cluster_config)
                    self._options[key] = options
                client = self._clients[key]

        cached = self._options.get(key)
        if cached is not None and cached != options:
            logger.warning(
                f"ES 客户端 {cluster_config.host}:{cluster_config.port} 已按不同的连接选项"
                f"创建（协议/认证/证书），继续复用已有客户端，"
                f"集群 '{cluster_config.name}' 的配置被忽略"
            )
        return client

    def __len__(self) -> int:
        return len(self._clients)

    # ============================================================
    # 生命周期管理
    # ============================================================

    def __enter__(self) -> ConnectionPool:
        """上下文管理器入口.

        Returns:
            连接池实例自身
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """上下文管理器退出，自动关闭所有客户端."""
        self.close_all()

    def close_all(self) -> None:
        """关闭所有已创建的客户端连接并清空缓存.

        关闭单个客户端失败只记录告警，不影响其余客户端的关闭。
        """
        with self._lock:
            for (host, port), client in self._clients.items():
                try:
                    client.close()
                except Exception as e:
                    logger.warning(f"关闭 ES 客户端 {host}:{port} 失败: {e}")
            self._clients.clear()
            self._options.clear()
