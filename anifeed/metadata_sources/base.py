"""
元数据源抽象基类

元数据源只负责把提供方返回的 JSON 转换为对齐所需的四种能力；
网络请求、超时、重试由调用方注入的 fetch_json 负责。
"""
import logging
from abc import ABC
from typing import Any, Awaitable, Callable, ClassVar, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from anifeed.models import RelationEdge

# async def fetch_json(endpoint: str, params: Optional[dict]) -> Any
JsonFetcher = Callable[[str, Optional[Dict[str, Any]]], Awaitable[Any]]

T = TypeVar("T")


class MetadataSourceError(Exception):
    """元数据源调用失败"""

    def __init__(self, provider_name: str, message: str):
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class MetadataPayloadError(MetadataSourceError):
    """元数据源返回了无法解析的数据"""


class BaseMetadataSource(ABC):
    """
    元数据源基类

    四种能力均为可选：不支持或没有数据时返回 None。
    子类只需覆盖自己支持的方法。
    """

    provider_name: ClassVar[str] = ""

    def __init__(self, fetch_json: JsonFetcher):
        self._fetch_json = fetch_json
        self.logger = logging.getLogger(self.__class__.__name__)

    async def _fetch(self, endpoint: str, params: Optional[Dict[str, Any]], model: Type[T]) -> Optional[T]:
        """请求并校验一个端点；返回 None 表示提供方没有该资源"""
        self.logger.debug(f"{self.provider_name}: 请求 {endpoint} params={params}")
        data = await self._fetch_json(endpoint, params)
        if data is None:
            return None
        try:
            if isinstance(model, type) and issubclass(model, BaseModel):
                return model.model_validate(data)
            return TypeAdapter(model).validate_python(data)
        except ValidationError as e:
            raise MetadataPayloadError(self.provider_name, f"{endpoint} 返回的数据格式无效: {e}") from e

    async def get_subject_classification(self, subject_id: str) -> Optional[bool]:
        """是否为电影或单集条目"""
        return None

    async def get_episode_sort_map(self, subject_id: str) -> Optional[Dict[int, int]]:
        """本季集数 → 全局排序序号"""
        return None

    async def get_relations(self, subject_id: str) -> Optional[List[RelationEdge]]:
        return None

    async def get_total_episodes(self, subject_id: str) -> Optional[int]:
        return None
