"""Input validation for pipeline parameters."""

from typing import Any, Dict, List, Optional
import re

from pipeline_cli.exceptions import ValidationError
from pipeline_cli.models import ApplicationType


DNS_1123_LABEL = re.compile(r'^[a-z0-9]([-a-z0-9]*[a-z0-9])?$')
TRUE_VALUES = {"true", "yes", "1", "on"}
FALSE_VALUES = {"false", "no", "0", "off", ""}


class Validator:
    """Validates raw pipeline parameters."""

    def missing_parameters(self, required: List[str], provided: Dict[str, Any]) -> List[str]:
        """Return every required parameter that is absent or empty.

        Args:
            required: List of required parameter names
            provided: Dictionary of provided parameters

        Returns:
            Missing parameter names, in the order they were required
        """
        missing = []
        for param in required:
            value = provided.get(param)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(param)
        return missing

    def validate_parameters(self, required: List[str], provided: Dict[str, Any]) -> bool:
        """Validate that all required parameters are provided.

        Raises:
            ValidationError: Listing every missing parameter at once
        """
        if not isinstance(provided, dict):
            raise ValidationError("Pipeline parameters must be a mapping")

        missing = self.missing_parameters(required, provided)
        if missing:
            raise ValidationError(
                f"Missing required parameters: {', '.join(missing)}",
                fields=missing
            )
        return True

    def validate_unknown_keys(self, recognized: List[str], provided: Dict[str, Any]) -> bool:
        unknown = sorted(key for key in provided if key not in recognized)
        if unknown:
            raise ValidationError(
                f"Unknown parameters: {', '.join(unknown)}. "
                f"Recognized parameters: {', '.join(recognized)}",
                fields=unknown
            )
        return True

    def validate_app_type(self, app_type: str) -> ApplicationType:
        """Validate an application type against the supported set.

        Args:
            app_type: Raw application type value

        Returns:
            The matching ApplicationType

        Raises:
            ValidationError: If the value is not a supported application type
        """
        try:
            return ApplicationType(app_type)
        except ValueError:
            raise ValidationError(
                f"Invalid appType '{app_type}'. Valid types: {', '.join(ApplicationType.values())}",
                fields=["appType"]
            )

    def validate_name(self, value: str, field: str) -> str:
        """Validate a Kubernetes object name (DNS-1123 label)."""
        if not isinstance(value, str) or not DNS_1123_LABEL.match(value):
            raise ValidationError(
                f"Invalid {field} '{value}'. Must be lowercase alphanumeric with hyphens, "
                "starting and ending with alphanumeric characters",
                fields=[field]
            )
        return value

    def validate_port(self, value: Any, field: str = "exposePort") -> int:
        """Parse a port number given as int or string.

        Raises:
            ValidationError: If the value is not an integer between 1 and 65535
        """
        if isinstance(value, bool):
            raise ValidationError(f"Invalid {field} '{value}'. Must be a positive integer", fields=[field])
        try:
            port = int(str(value).strip())
        except ValueError:
            raise ValidationError(f"Invalid {field} '{value}'. Must be a positive integer", fields=[field])
        if not 0 < port <= 65535:
            raise ValidationError(f"Invalid {field} '{value}'. Must be between 1 and 65535", fields=[field])
        return port

    def validate_bool(self, value: Any, field: str) -> bool:
        if isinstance(value, bool):
            return value
        normalized = str(value).strip().lower()
        if normalized in TRUE_VALUES:
            return True
        if normalized in FALSE_VALUES:
            return False
        raise ValidationError(f"Invalid {field} '{value}'. Must be true or false", fields=[field])

    def validate_build_id(self, build_id: Any) -> int:
        if isinstance(build_id, bool):
            raise ValidationError(f"Invalid build id '{build_id}'", fields=["buildId"])
        if isinstance(build_id, float) and not build_id.is_integer():
            raise ValidationError(f"Invalid build id '{build_id}'. Must be a whole number", fields=["buildId"])
        try:
            value = int(build_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid build id '{build_id}'. Must be an integer", fields=["buildId"])
        if value < 0:
            raise ValidationError(f"Invalid build id '{build_id}'. Must not be negative", fields=["buildId"])
        return value

    def validate_registry_template(self, template: str) -> str:
        """Check that a registry host template only uses the {environment} field."""
        try:
            template.format(environment="stg")
        except (AttributeError, IndexError, KeyError, TypeError, ValueError):
            raise ValidationError(
                f"Invalid registryHostTemplate '{template}'. Only the {{environment}} placeholder is supported",
                fields=["registryHostTemplate"]
            )
        return template


def optional_text(value: Any) -> Optional[str]:
    """Normalize unset markers ('', 'null', None) to None."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == "null":
        return None
    return text
