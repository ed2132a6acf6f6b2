"""Application configuration."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    config_path: Path = Path("scrapbox-config.json")
    api_base_url: str = "https://scrapbox.io"
    request_timeout: float = 10.0
    user_agent: str = "PageGraph/0.1.0"
    cache_ttl: float = 300.0
    cache_maxsize: int = 256

    search_limit: int = 10
    connection_limit: int = 20
    context_lines: int = 3
    theme_limit: int = 10
    tag_list_pages: int = 10

    log_level: str = "INFO"
    debug: bool = False
    app_title: str = "PageGraph"

    model_config = SettingsConfigDict(
        env_prefix="PAGEGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


class ProjectConfig(BaseModel):
    """One project entry of the sources config file."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    export_data_path: Path | None = Field(default=None, alias="exportDataPath")
    export_paths: list[Path] = Field(default_factory=list, alias="exportPaths")
    description: str | None = None


class SourcesConfig(BaseModel):
    """Sources config file: which projects to load and from where."""

    projects: list[ProjectConfig] = Field(default_factory=list)


EXAMPLE_SOURCES_CONFIG = {
    "projects": [
        {
            "name": "my-project",
            "exportDataPath": "./data/my-project-export.json",
        },
        {
            "name": "my-split-project",
            "exportPaths": [
                "./data/parts/my-project-part1.json",
                "./data/parts/my-project-part2.json",
                "./data/parts/my-project-part3.json",
            ],
        },
    ]
}


settings = Settings()
