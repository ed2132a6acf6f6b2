"""Load the configured projects into a registry."""

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from pagegraph.config import EXAMPLE_SOURCES_CONFIG, ProjectConfig, SourcesConfig
from pagegraph.core.errors import SourceUnavailableError
from pagegraph.core.registry import ProjectRegistry
from pagegraph.core.sources import ScrapboxClient, load_export, load_raw_batches

logger = logging.getLogger(__name__)


def read_sources_config(path: Path) -> SourcesConfig | None:
    """Parse the sources config file: JSON for a .json suffix, YAML otherwise.

    Returns None when the file does not exist.

    Raises:
        SourceUnavailableError: The file exists but cannot be parsed.
    """
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            data = json.loads(text) if text.strip() else {}
        else:
            data = yaml.safe_load(text) or {}
        return SourcesConfig.model_validate(data)
    except (OSError, json.JSONDecodeError, yaml.YAMLError, ValidationError) as e:
        raise SourceUnavailableError(str(path), f"invalid config: {e}") from e


async def load_project(
    registry: ProjectRegistry,
    project_config: ProjectConfig,
    client: ScrapboxClient | None = None,
) -> bool:
    """Load one project from split parts, a single export, or the API.

    Export-file failures propagate. An API failure is logged and the
    project is skipped; returns False in that case.
    """
    name = project_config.name
    if project_config.export_paths:
        logger.info("Loading project %s from %d split files", name, len(project_config.export_paths))
        batches = load_raw_batches(project_config.export_paths)
        registry.add_project(name, raw_batches=batches, description=project_config.description)
    elif project_config.export_data_path:
        export = load_export(project_config.export_data_path)
        registry.add_project(
            name,
            raw_pages=export.pages,
            display_name=export.display_name,
            description=project_config.description,
        )
    else:
        if client is None:
            logger.error("No export configured for project %s and no API client available", name)
            return False
        try:
            raw_pages = await client.get_project_pages(name)
        except SourceUnavailableError as e:
            logger.error("Failed to load project %s from API: %s", name, e)
            return False
        registry.add_project(name, raw_pages=raw_pages, description=project_config.description)
        logger.info("Loaded project %s from API", name)
        return True

    logger.info("Loaded project %s from export data", name)
    return True


async def load_configured_projects(
    registry: ProjectRegistry,
    config_path: Path,
    client: ScrapboxClient | None = None,
) -> ProjectRegistry:
    """Populate ``registry`` from the sources config at ``config_path``.

    A missing config file leaves the registry empty and logs an example.
    """
    sources = read_sources_config(config_path)
    if sources is None:
        logger.error("Config file not found: %s", config_path)
        logger.error(
            "Create a config file with project settings, or set PAGEGRAPH_CONFIG_PATH. Example:\n%s",
            json.dumps(EXAMPLE_SOURCES_CONFIG, indent=2),
        )
        return registry

    for project_config in sources.projects:
        await load_project(registry, project_config, client)
    return registry
