"""索引生命周期工具函数."""

import re
from collections.abc import Iterable, Iterator, Mapping
from datetime import datetime
from itertools import islice
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import LifecycleConfig

# 代次时间戳格式，14 位数字，例如 20130514124608
GENERATION_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

IMPORTING_ALIAS_SUFFIX = "_importing"


def underscore(name: str) -> str:
    """将 CamelCase / 带空格或连字符的名称转换为 snake_case."""
    name = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", name.strip())
    return re.sub(r"[\s\-]+", "_", name).lower()


def environment_name(environment: str) -> str:
    # preview 需要直接使用 production 的索引，以展示相同的数据
    environment = environment.lower()
    return "production" if environment == "preview" else environment


def build_alias(
    family_name: str,
    config: "LifecycleConfig",
    environ: Mapping[str, str],
) -> str:
    """计算索引族的对外别名.

    由索引族名、站点、环境以及存在的环境变量后缀依次拼接，例如
    "products_uk_test_3"。

    Args:
        family_name: 索引族名称
        config: 生命周期配置
        environ: 环境变量

    Returns:
        别名
    """
    parts = [family_name]
    if config.site:
        parts.append(underscore(config.site))
    parts.append(environment_name(config.environment))
    for variable in config.alias_suffix_env_vars:
        value = environ.get(variable)
        if value:
            parts.append(value)
    return "_".join(parts)


def generation_name(alias: str, moment: datetime) -> str:
    return f"{alias}_{moment.strftime(GENERATION_TIMESTAMP_FORMAT)}"


def generation_pattern(alias: str) -> re.Pattern[str]:
    return re.compile(rf"\A{re.escape(alias)}_\d{{14}}\Z")


def generations_of(alias: str, index_names: Iterable[str]) -> list[str]:
    """筛选属于别名的代次并从旧到新排序."""
    pattern = generation_pattern(alias)
    return sorted(name for name in index_names if pattern.match(name))


def build_settings(config: "LifecycleConfig", family_name: str) -> dict[str, Any]:
    """构建索引设置：分片 / 副本数与分析器.

    Args:
        config: 生命周期配置
        family_name: 索引族名称，用于查找按族配置的分片数

    Returns:
        创建索引使用的 settings
    """
    english_filters = ["lowercase", "english_stop", "apostrophe", "light_english"]
    if config.synonyms_path:
        english_filters.append("en_synonym")

    settings: dict[str, Any] = {
        "analysis": {
            "analyzer": {
                "snowball": {
                    "type": "custom",
                    "tokenizer": "standard",
                    "filter": ["lowercase", "snowball_stemmer"],
                },
                "light_english": {
                    "type": "custom",
                    "tokenizer": "standard",
                    "filter": english_filters,
                },
                "light_german": {
                    "type": "custom",
                    "tokenizer": "standard",
                    "filter": ["lowercase", "german_stop", "light_german"],
                },
            },
            "filter": {
                "snowball_stemmer": {"type": "snowball", "language": config.language},
                "light_english": {"type": "stemmer", "name": "light_english"},
                "light_german": {"type": "stemmer", "name": "light_german"},
                "english_stop": {"type": "stop", "stopwords": "_english_"},
                "german_stop": {"type": "stop", "stopwords": "_german_"},
            },
        }
    }

    if config.synonyms_path:
        settings["analysis"]["filter"]["en_synonym"] = {
            "type": "synonym",
            "synonyms_path": config.synonyms_path,
        }

    shards = config.shards_for(family_name)
    if shards:
        settings["number_of_shards"] = shards
    replicas = config.replicas_for(family_name)
    if replicas is not None:
        settings["number_of_replicas"] = replicas
    return settings


def chunked(records: Iterable[Any], size: int) -> Iterator[list[Any]]:
    """按固定大小切分可迭代对象，最后一批可能不足 size."""
    iterator = iter(records)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch
