"""
Pipeline configuration management.

Loads code tables and table names from YAML files into a validated
PipelineConfig. Every setting has a built-in default, so a missing or
partial file still yields a complete configuration.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.core.models import EntityKind


class ConfigError(ValueError):
    """Raised when a pipeline configuration file is malformed."""


DEFAULT_UNKNOWN_LABEL = "Unknown"

DEFAULT_MARITAL_STATUS_CODES = {
    "S": "Single",
    "M": "Married",
}

DEFAULT_GENDER_CODES = {
    "F": "Female",
    "M": "Male",
    "FEMALE": "Female",
    "MALE": "Male",
}

DEFAULT_PRODUCT_LINE_CODES = {
    "M": "Mountain",
    "R": "Road",
    "S": "Other Sales",
    "T": "Touring",
}

DEFAULT_COUNTRY_CODES = {
    "DE": "Germany",
    "US": "United States",
    "USA": "United States",
}

DEFAULT_BRONZE_TABLES = {
    EntityKind.CUSTOMER: "crm_cust_info",
    EntityKind.PRODUCT: "crm_prd_info",
    EntityKind.SALES_LINE: "crm_sales_details",
    EntityKind.CUSTOMER_DEMO: "erp_cust_az12",
    EntityKind.LOCATION: "erp_loc_a101",
    EntityKind.PRODUCT_CATEGORY: "erp_px_cat_g1v2",
}


def _upper_keys(table: dict[str, str]) -> dict[str, str]:
    return {str(code).strip().upper(): str(label) for code, label in table.items()}


class CodeTables(BaseModel):
    """
    Fixed code -> canonical value lookups used by the field normalizer.

    Codes are matched case-insensitively after trimming, so keys are stored
    upper-cased.
    """

    marital_status: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_MARITAL_STATUS_CODES))
    gender: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_GENDER_CODES))
    product_line: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_PRODUCT_LINE_CODES))
    country: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_COUNTRY_CODES))

    @field_validator("marital_status", "gender", "product_line", "country")
    @classmethod
    def normalize_codes(cls, v: dict[str, str]) -> dict[str, str]:
        return _upper_keys(v)


class PipelineConfig(BaseModel):
    """
    Settings for one silver pipeline deployment.

    Attributes:
        unknown_label: Value used for blank or unmapped enumerated codes
        code_tables: Enumerated-field lookups
        bronze_schema: Catalog schema holding the raw tables
        bronze_tables: Raw table name per entity kind
        silver_schema: Database schema holding the cleaned tables
    """

    unknown_label: str = Field(DEFAULT_UNKNOWN_LABEL, min_length=1)
    code_tables: CodeTables = Field(default_factory=CodeTables)
    bronze_schema: str = "bronze"
    bronze_tables: dict[EntityKind, str] = Field(default_factory=lambda: dict(DEFAULT_BRONZE_TABLES))
    silver_schema: str = "silver"

    @field_validator("bronze_tables")
    @classmethod
    def fill_missing_tables(cls, v: dict[EntityKind, str]) -> dict[EntityKind, str]:
        """Fall back to the default table name for kinds the file leaves out."""
        return {**DEFAULT_BRONZE_TABLES, **v}

    def bronze_table(self, kind: EntityKind) -> str:
        """Fully qualified raw table name for a kind."""
        return f"{self.bronze_schema}.{self.bronze_tables[kind]}"


class PipelineConfigLoader:
    """
    Loads pipeline settings from a YAML configuration file.

    Expected YAML format (every key optional):
    ```yaml
    unknown_label: Unknown
    code_tables:
      gender:
        F: Female
        M: Male
      country:
        DE: Germany
        US: United States
    bronze_schema: bronze
    bronze_tables:
      customer: crm_cust_info
    silver_schema: silver
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Pipeline configuration file not found: {config_path}")

    def load(self) -> PipelineConfig:
        """
        Load and validate the configuration.

        Returns:
            PipelineConfig with defaults for anything the file omits

        Raises:
            ConfigError: If the YAML is invalid or a setting fails validation
        """
        with open(self.config_path) as f:
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if raw is None:
            return PipelineConfig()
        if not isinstance(raw, dict):
            raise ConfigError(f"Configuration in {self.config_path} must be a mapping")

        return self.from_dict(raw)

    @staticmethod
    def from_dict(raw: dict[str, Any]) -> PipelineConfig:
        """Build a PipelineConfig from an already-parsed mapping."""
        try:
            return PipelineConfig(**raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid pipeline configuration: {e}") from e


def load_config(config_path: str | Path | None = None) -> PipelineConfig:
    """
    Load configuration from a file, or return defaults when no file exists.

    Args:
        config_path: Optional path to the YAML file

    Returns:
        PipelineConfig instance
    """
    if config_path is None or not Path(config_path).exists():
        return PipelineConfig()
    return PipelineConfigLoader(config_path).load()
