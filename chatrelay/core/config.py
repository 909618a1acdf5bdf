import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type

from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from sqlalchemy.engine import URL

CONFIG_FILE_ENV = "RELAY_CONFIG_FILE"
DEFAULT_CONFIG_FILE = "config.json"

# Nested keys of the JSON config file mapped onto flat settings fields.
_NESTED_KEYS = {
    "database": {
        "host": "db_host",
        "user": "db_user",
        "password": "db_password",
        "database": "db_name",
        "port": "db_port",
    },
    "app": {
        "port": "port",
        "host": "host",
    },
}


class JsonConfigFileSource(PydanticBaseSettingsSource):
    """
    Reads settings from a JSON file shaped like
    ``{"database": {"host": ...}, "app": {"port": ...}}``.
    Top-level keys that match a settings field are taken as they are.
    """

    def __init__(self, settings_cls: Type[BaseSettings], config_file: Path):
        super().__init__(settings_cls)
        self.config_file = config_file
        self._values = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.config_file.is_file():
            return {}
        with self.config_file.open("r", encoding="utf-8") as f:
            raw = json.load(f)

        values: Dict[str, Any] = {}
        for key, value in raw.items():
            if key in _NESTED_KEYS and isinstance(value, dict):
                for nested_key, field_name in _NESTED_KEYS[key].items():
                    if value.get(nested_key) is not None:
                        values[field_name] = value[nested_key]
            elif key in self.settings_cls.model_fields:
                values[key] = value
        return values

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        return self._values.get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        return {k: v for k, v in self._values.items() if v is not None}


class Settings(BaseSettings):
    db_host: Optional[str] = None
    db_user: Optional[str] = None
    db_password: Optional[str] = None
    db_name: Optional[str] = None
    db_port: int = 5432
    db_driver: str = "postgresql+asyncpg"
    database_url: Optional[str] = None
    db_connect_timeout: float = 5.0

    host: str = "0.0.0.0"
    port: int = 3001
    static_dir: str = "static"
    history_limit: int = 50
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        config_file = Path(os.getenv(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE))
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigFileSource(settings_cls, config_file),
            file_secret_settings,
        )

    @property
    def sqlalchemy_url(self) -> Optional[str]:
        """
        The URL of the durable store, or None when no store is configured.
        An explicit ``database_url`` wins over the individual ``db_*`` parts.
        """
        if self.database_url:
            return self.database_url
        if not self.db_host:
            return None
        url = URL.create(
            self.db_driver,
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)


settings = Settings()
