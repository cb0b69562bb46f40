"""
Skill Catalogue Validation

Cross-skill checks that single-model validation cannot express. These are
configuration errors, caught before any event is evaluated.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List

from jinja2 import Environment, TemplateSyntaxError

from .models import Channel, SkillCatalogue


@dataclass
class ValidationResult:
    """Result of a validation check."""
    is_valid: bool
    errors: List[str] = None
    warnings: List[str] = None

    def __post_init__(self):
        if self.errors is None:
            self.errors = []
        if self.warnings is None:
            self.warnings = []


class CatalogueValidator:
    """Validates a parsed catalogue as a whole."""

    def __init__(self):
        self.template_env = Environment(autoescape=False)

    def validate(self, catalogue: SkillCatalogue) -> ValidationResult:
        errors: List[str] = []
        warnings: List[str] = []

        errors.extend(self._check_ivr_digits(catalogue))
        errors.extend(self._check_templates(catalogue))
        warnings.extend(self._check_references(catalogue))

        return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    def _check_ivr_digits(self, catalogue: SkillCatalogue) -> List[str]:
        """Enabled IVR tools sharing a channel must not claim the same digit."""
        errors = []
        for channel in Channel:
            claims: Dict[str, List[str]] = defaultdict(list)
            for skill in catalogue.ordered_skills():
                ivr = skill.tools.ivr
                if ivr.enabled and ivr.trigger_digit and skill.channels.supports(channel):
                    claims[ivr.trigger_digit].append(skill.id)

            for digit, skill_ids in sorted(claims.items()):
                if len(skill_ids) > 1:
                    errors.append(
                        f"DTMF digit '{digit}' is claimed by several skills on "
                        f"{channel.value}: {', '.join(skill_ids)}"
                    )
        return errors

    def _check_templates(self, catalogue: SkillCatalogue) -> List[str]:
        errors = []
        for skill in catalogue.ordered_skills():
            templates = {
                "tools.sms.template": skill.tools.sms.template,
                "tools.transfer.whisperMessage": skill.tools.transfer.whisper_message,
            }
            for location, template in templates.items():
                if not template:
                    continue
                try:
                    self.template_env.parse(template)
                except TemplateSyntaxError as e:
                    errors.append(f"skills.{skill.id}.{location}: invalid template ({e.message})")
        return errors

    def _check_references(self, catalogue: SkillCatalogue) -> List[str]:
        """Warn about configuration that parses but can never take effect."""
        warnings = []
        for skill in catalogue.ordered_skills():
            input_ids = {f.id for f in skill.inputs}
            for field_id in skill.integration.field_mapping:
                if field_id not in input_ids:
                    warnings.append(
                        f"skills.{skill.id}.integration.fieldMapping maps unknown input '{field_id}'"
                    )
            if skill.enabled and not (skill.channels.sms or skill.channels.voice):
                warnings.append(f"skills.{skill.id} is enabled but has no channel")
            if skill.tools.ivr.enabled and not skill.tools.ivr.trigger_digit:
                warnings.append(f"skills.{skill.id}.tools.ivr is enabled without a trigger digit")
            if skill.tools.transfer.enabled and not skill.tools.transfer.conditions:
                warnings.append(f"skills.{skill.id}.tools.transfer is enabled without conditions")
        return warnings
