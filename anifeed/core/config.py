import yaml
from pathlib import Path
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


# 1. 为配置的不同部分创建 Pydantic 模型，提供类型提示和默认值
class LogConfig(BaseModel):
    level: str = "INFO"
    to_file: bool = False
    dir: str = "config/logs"


class ReconcileConfig(BaseModel):
    # 沿前传关系向前追溯的最大层数
    max_prequel_depth: int = 8
    # 视为 "前传" 的关系类型，比较时忽略大小写
    prequel_relation_kinds: List[str] = Field(default_factory=lambda: ["前传", "prequel"])
    # 读取 Bangumi 分集列表时的分页大小
    bangumi_page_size: int = 100


def _is_docker_environment() -> bool:
    """检测是否在Docker容器中运行"""
    import os
    # 方法1: 检查 /.dockerenv 文件（Docker标准做法）
    if Path("/.dockerenv").exists():
        return True
    # 方法2: 检查环境变量
    if os.getenv("DOCKER_CONTAINER") == "true" or os.getenv("IN_DOCKER") == "true":
        return True
    # 方法3: 检查当前工作目录是否为 /app
    return Path.cwd() == Path("/app")


# 2. 创建一个自定义的配置源，用于从 YAML 文件加载设置
class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    def __init__(self, settings_cls: type[BaseSettings], yaml_file: Path = None):
        super().__init__(settings_cls)
        if yaml_file is not None:
            self.yaml_file = yaml_file
        elif _is_docker_environment():
            # 容器环境
            self.yaml_file = Path("/app/config/config.yml")
        else:
            # 源码运行环境
            self.yaml_file = Path("config/config.yml")

    def get_field_value(self, field, field_name):
        return None, None, False

    def __call__(self) -> Dict[str, Any]:
        if not self.yaml_file.is_file():
            return {}
        with open(self.yaml_file, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}


# 3. 定义主设置类，它将聚合所有配置
class Settings(BaseSettings):
    log: LogConfig = LogConfig()
    reconcile: ReconcileConfig = ReconcileConfig()

    # 为环境变量设置前缀，避免与系统变量冲突
    # 例如，设置环境变量 ANIFEED_RECONCILE__MAX_PREQUEL_DEPTH=4
    model_config = SettingsConfigDict(
        env_prefix="ANIFEED_",
        case_sensitive=False,
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # 定义加载源的优先级:
        # 1. 环境变量 (最高)
        # 2. .env 文件
        # 3. YAML 文件
        # 4. 文件密钥
        # 5. Pydantic 模型中的默认值 (最低)
        return (
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
            init_settings,
        )


settings = Settings()
