"""elasticswap 类型定义模块."""

from typing import Any, Dict, List

# 文档类型：字段名到值的有序字典，必须包含 id
Document = Dict[str, Any]

# 映射定义：{字段名: 字段 schema}
MappingDefinition = Dict[str, Dict[str, Any]]

# 索引设置定义
SettingsDefinition = Dict[str, Any]

# 查询体（原样转发给 ES）
QueryBody = Dict[str, Any]

# ES 原始响应
RawResponse = Dict[str, Any]

# 批量写入的文档列表
DocumentBatch = List[Document]
