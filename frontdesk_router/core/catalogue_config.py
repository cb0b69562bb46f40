"""
File-based Skill Catalogue Configuration

This module loads a skill catalogue from a YAML or JSON file, applies
environment-specific overrides and validates the result before the routing
engine ever sees it.
"""

import json
import yaml
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from .models import SkillCatalogue
from .catalogue_validator import CatalogueValidator
from .exceptions.routing_exceptions import CatalogueNotFoundError, CatalogueValidationError

DEFAULT_CATALOGUE_TEMPLATE = "clinic_default.yaml"


class CatalogueLoader:
    """Loads skill catalogues from configuration files."""

    def __init__(self, validator: Optional[CatalogueValidator] = None):
        self.validator = validator or CatalogueValidator()

    def load(self, path: Union[str, Path], environment: str = "default") -> SkillCatalogue:
        """
        Load and validate a catalogue file.

        Args:
            path: Path to a .yaml/.yml/.json catalogue
            environment: Environment whose overrides are merged over the base

        Returns:
            Validated SkillCatalogue

        Raises:
            CatalogueNotFoundError: The file does not exist
            CatalogueValidationError: The file content is not a valid catalogue
        """
        file_path = Path(path)
        if not file_path.exists():
            raise CatalogueNotFoundError(f"Catalogue file not found: {file_path}")

        data = self._load_config_file(file_path, environment)
        return self.from_dict(data, source=str(file_path))

    def load_default(self, environment: str = "default") -> SkillCatalogue:
        """Load the sample clinic catalogue shipped with the package."""
        template = resources.files("frontdesk_router") / "templates" / "catalogues" / DEFAULT_CATALOGUE_TEMPLATE
        with resources.as_file(template) as file_path:
            return self.load(file_path, environment)

    def from_dict(self, data: Dict[str, Any], source: str = "<dict>") -> SkillCatalogue:
        """Validate raw configuration data into a catalogue."""
        try:
            catalogue = SkillCatalogue.model_validate(data)
        except ValidationError as e:
            raise CatalogueValidationError(
                f"Invalid skill catalogue in {source}",
                errors=self._format_errors(e)
            ) from e

        result = self.validator.validate(catalogue)
        if not result.is_valid:
            raise CatalogueValidationError(
                f"Invalid skill catalogue in {source}",
                errors=result.errors
            )
        return catalogue

    def _load_config_file(self, file_path: Path, environment: str) -> Dict[str, Any]:
        """Load and parse YAML/JSON configuration file with environment overrides."""
        with open(file_path, 'r', encoding='utf-8') as f:
            try:
                if file_path.suffix in ['.yaml', '.yml']:
                    config = yaml.safe_load(f) or {}
                elif file_path.suffix == '.json':
                    config = json.load(f)
                else:
                    raise CatalogueValidationError(f"Unsupported file format: {file_path.suffix}")
            except (yaml.YAMLError, json.JSONDecodeError) as e:
                raise CatalogueValidationError(f"Could not parse {file_path}: {e}") from e

        if not isinstance(config, dict):
            raise CatalogueValidationError(f"Catalogue {file_path} must contain a mapping at the top level")

        # Apply environment-specific overrides
        if environment != "default" and "environments" in config:
            environments = config.get("environments")
            if not isinstance(environments, dict):
                raise CatalogueValidationError(
                    f"Catalogue {file_path}: 'environments' must be a mapping of environment names"
                )
            if environment in environments:
                env_config = environments[environment]
                if not isinstance(env_config, dict):
                    raise CatalogueValidationError(
                        f"Catalogue {file_path}: overrides for environment '{environment}' must be a mapping"
                    )
                config = self._merge_configs(config, env_config)

        # Remove environments section from final config
        config.pop("environments", None)

        return config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries.

        Skills given as a list are merged by id, so an environment can tweak
        one skill without restating the whole list.
        """
        result = base.copy()

        for key, value in override.items():
            if key == "skills" and isinstance(result.get(key), list) and isinstance(value, (list, dict)):
                result[key] = self._merge_skill_list(result[key], value)
            elif key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _merge_skill_list(
        self,
        base: List[Dict[str, Any]],
        override: Union[List[Dict[str, Any]], Dict[str, Dict[str, Any]]]
    ) -> List[Dict[str, Any]]:
        if isinstance(override, dict):
            override = [
                {"id": key, **value} if isinstance(value, dict) else value
                for key, value in override.items()
            ]

        if not all(isinstance(skill, dict) for skill in list(base) + list(override)):
            raise CatalogueValidationError("Skills merged by environment overrides must be mappings")

        merged = [dict(skill) for skill in base]
        positions = {skill.get("id"): index for index, skill in enumerate(merged)}
        for skill in override:
            skill_id = skill.get("id")
            if skill_id in positions:
                merged[positions[skill_id]] = self._merge_configs(merged[positions[skill_id]], skill)
            else:
                positions[skill_id] = len(merged)
                merged.append(skill)
        return merged

    def _format_errors(self, error: ValidationError) -> List[str]:
        messages = []
        for item in error.errors():
            location = ".".join(str(part) for part in item.get("loc", ()))
            messages.append(f"{location}: {item.get('msg')}" if location else item.get("msg"))
        return messages
