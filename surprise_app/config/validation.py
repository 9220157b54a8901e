"""Configuration validation utilities."""

from dataclasses import dataclass, fields
from typing import Any
from urllib.parse import urlparse

from ..state.parameters import DOMAINS, ParameterField
from .defaults import (
    ApiParams,
    ExportParams,
    LoadingParams,
    LoggingParams,
    SelectionParams,
)

SECTIONS = {
    "api": ApiParams,
    "loading": LoadingParams,
    "export": ExportParams,
    "selection": SelectionParams,
    "logging": LoggingParams,
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_structure(config: dict[str, Any]) -> list[ValidationError]:
        """Reject unknown sections and keys."""
        errors = []

        for section, value in config.items():
            params_cls = SECTIONS.get(section)
            if params_cls is None:
                errors.append(ValidationError(
                    field=section,
                    message="Unknown configuration section",
                    value=value
                ))
                continue

            if not isinstance(value, dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=value
                ))
                continue

            known = {f.name for f in fields(params_cls)}
            for key in value:
                if key not in known:
                    errors.append(ValidationError(
                        field=f"{section}.{key}",
                        message="Unknown configuration key",
                        value=value[key]
                    ))

        return errors

    @staticmethod
    def validate_api_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate remote service parameters."""
        errors = []

        if "base_url" in params:
            value = params["base_url"]
            if not isinstance(value, str):
                errors.append(ValidationError(
                    field="api.base_url",
                    message="Must be a string",
                    value=value
                ))
            elif value:
                parsed = urlparse(value)
                if parsed.scheme not in ("http", "https") or not parsed.netloc:
                    errors.append(ValidationError(
                        field="api.base_url",
                        message="Must be empty or an absolute http(s) URL",
                        value=value
                    ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                errors.append(ValidationError(
                    field="api.timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_loading_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate loading escalation parameters."""
        errors = []

        if "escalation_delay_seconds" in params:
            value = params["escalation_delay_seconds"]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                errors.append(ValidationError(
                    field="loading.escalation_delay_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_export_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate export parameters."""
        errors = []

        if "delimiter" in params:
            value = params["delimiter"]
            if not isinstance(value, str) or len(value) != 1 or value in ('"', "\n", "\r"):
                errors.append(ValidationError(
                    field="export.delimiter",
                    message="Must be a single character other than a quote or newline",
                    value=value
                ))

        if "download_dir" in params:
            value = params["download_dir"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="export.download_dir",
                    message="Must be a non-empty path",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_selection_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate default selections against the parameter domains."""
        errors = []

        for field in ParameterField:
            if field.value in params and params[field.value] not in DOMAINS[field]:
                errors.append(ValidationError(
                    field=f"selection.{field.value}",
                    message=f"Must be one of {', '.join(DOMAINS[field])}",
                    value=params[field.value]
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in LOG_LEVELS:
                errors.append(ValidationError(
                    field="logging.level",
                    message=f"Must be one of {', '.join(LOG_LEVELS)}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = ConfigValidator.validate_structure(config)
        if errors:
            return errors

        errors.extend(ConfigValidator.validate_api_params(config.get("api", {})))
        errors.extend(ConfigValidator.validate_loading_params(config.get("loading", {})))
        errors.extend(ConfigValidator.validate_export_params(config.get("export", {})))
        errors.extend(ConfigValidator.validate_selection_params(config.get("selection", {})))
        errors.extend(ConfigValidator.validate_logging_params(config.get("logging", {})))

        return errors
