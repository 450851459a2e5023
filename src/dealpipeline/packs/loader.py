"""
DealPipeline Pipeline Pack Loader

Loads and validates pipeline packs from YAML or JSON files.

Converts Pydantic schema models to DealPipeline configuration models.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from ..canon import compute_pack_hash
from ..exceptions import PackLoadError, PackValidationError, PackVersionMismatch
from ..models import (
    ApprovalDepartment,
    ApprovalStage,
    ApproverLevelDefinition,
    DepartmentDefinition,
    FinalApprovalRule,
    FinalApproverLevel,
    PipelineConfig,
    StageDefinition,
)
from .schema import (
    SCHEMA_VERSION,
    ApproverLevelSchema,
    DepartmentSchema,
    FinalApprovalSchema,
    PipelinePackSchema,
    StageSchema,
    check_schema_version,
    validate_pipeline_pack,
)

logger = logging.getLogger(__name__)

DEFAULT_PACK_PATH = Path(__file__).resolve().parent / "default_pipeline.yaml"


# =============================================================================
# Reference Integrity Validation
# =============================================================================

def validate_reference_integrity(config: PipelineConfig, path: str = "") -> None:
    """
    Validate that stage tables only reference configured departments.

    Catches:
    - Stages requiring a department with no department entry
    - Review steps for a department with no department entry

    Raises:
        ValueError: If reference integrity errors are found
    """
    errors = []
    known = set(config.departments)

    for stage in config.stages:
        for dept in stage.required_departments:
            if dept not in known:
                errors.append(
                    f"Stage '{stage.stage.value}' requires unknown department '{dept.value}'"
                )
        for dept in stage.review_steps:
            if dept not in known:
                errors.append(
                    f"Stage '{stage.stage.value}' has review steps for unknown department '{dept.value}'"
                )

    if errors:
        path_str = f" in {path}" if path else ""
        raise ValueError(
            f"Reference integrity errors{path_str}:\n" +
            "\n".join(f"  - {e}" for e in errors)
        )


# =============================================================================
# Schema to Model Converters
# =============================================================================

def _convert_department(schema: DepartmentSchema) -> DepartmentDefinition:
    """Convert DepartmentSchema to DepartmentDefinition model."""
    return DepartmentDefinition(
        department=ApprovalDepartment(schema.department),
        display_name=schema.display_name,
        description=schema.description,
        contact_email=schema.contact_email,
        incentive_types=frozenset(schema.incentive_types),
    )


def _convert_stage(schema: StageSchema) -> StageDefinition:
    """Convert StageSchema to StageDefinition model."""
    return StageDefinition(
        stage=ApprovalStage(schema.stage),
        name=schema.name,
        description=schema.description,
        can_run_parallel=schema.can_run_parallel,
        required_departments=tuple(ApprovalDepartment(d) for d in schema.required_departments),
        estimated_time=schema.estimated_time,
        required_for=tuple(schema.required_for),
        review_steps={
            ApprovalDepartment(dept): tuple(steps)
            for dept, steps in schema.review_steps.items()
        },
    )


def _convert_final_approval(schema: FinalApprovalSchema) -> FinalApprovalRule:
    """Convert FinalApprovalSchema to FinalApprovalRule model."""
    return FinalApprovalRule(
        director_ceiling=schema.director_ceiling,
        standard_deal_type=schema.standard_deal_type,
        escalating_sales_channels=frozenset(schema.escalating_sales_channels),
    )


def _convert_approver_level(schema: ApproverLevelSchema) -> ApproverLevelDefinition:
    """Convert ApproverLevelSchema to ApproverLevelDefinition model."""
    return ApproverLevelDefinition(
        level=FinalApproverLevel(schema.level),
        title=schema.title,
        description=schema.description,
        estimated_time=schema.estimated_time,
    )


def _convert_pipeline_pack(
    schema: PipelinePackSchema,
    pack_hash: Optional[str] = None,
) -> PipelineConfig:
    """Convert PipelinePackSchema to PipelineConfig model."""
    departments = [_convert_department(d) for d in schema.departments]
    levels = [_convert_approver_level(a) for a in schema.approver_levels]

    return PipelineConfig(
        departments={d.department: d for d in departments},
        stages=tuple(_convert_stage(s) for s in schema.stages),
        final_approval=_convert_final_approval(schema.final_approval),
        approver_levels={a.level: a for a in levels},
        pack_id=schema.id,
        pack_version=schema.version,
        pack_hash=pack_hash,
    )


# =============================================================================
# Pipeline Pack Loader
# =============================================================================

class PipelinePackLoader:
    """
    Loads pipeline packs from YAML or JSON files.

    Usage:
        loader = PipelinePackLoader()
        config = loader.load("path/to/pipeline.yaml")
    """

    def __init__(self, strict_version: bool = True):
        """
        Initialize the loader.

        Args:
            strict_version: If True, reject packs with incompatible schema versions
        """
        self.strict_version = strict_version
        self._configs: dict[str, PipelineConfig] = {}

    def load(self, path: Union[str, Path]) -> PipelineConfig:
        """
        Load a pipeline pack from a file.

        Raises:
            PackLoadError: If file cannot be read or parsed
            PackValidationError: If validation fails
            PackVersionMismatch: If schema version incompatible
        """
        path = Path(path)

        try:
            data = self._load_file(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise PackLoadError(
                message=f"Failed to load pipeline pack: {e}",
                details={"path": str(path), "error": str(e)},
            ) from e

        config = self.load_data(data, source=str(path))
        logger.debug(
            "Loaded pipeline pack %s (version %s) from %s",
            config.pack_id, config.pack_version, path,
        )
        return config

    def load_data(self, data: Any, source: str = "") -> PipelineConfig:
        """
        Validate and convert already-parsed pack data.

        Args:
            data: Dictionary loaded from YAML/JSON
            source: Where the data came from, for error messages
        """
        if not isinstance(data, dict):
            raise PackValidationError(
                message="Pipeline pack must be a mapping at the top level",
                details={"path": source, "type": type(data).__name__},
            )

        if self.strict_version and not check_schema_version(data):
            pack_version = data.get("schema_version", "unknown")
            raise PackVersionMismatch(
                message=f"Schema version mismatch: pack has {pack_version}, expected {SCHEMA_VERSION}",
                details={
                    "pack_version": pack_version,
                    "expected_version": SCHEMA_VERSION,
                },
            )

        try:
            schema = validate_pipeline_pack(data)
        except ValidationError as e:
            raise PackValidationError(
                message=f"Pipeline pack validation failed: {e.error_count()} errors",
                details={"errors": e.errors(include_url=False), "path": source},
            ) from e

        config = _convert_pipeline_pack(schema, pack_hash=compute_pack_hash(data))

        try:
            validate_reference_integrity(config, source)
        except ValueError as e:
            raise PackValidationError(
                message="Reference integrity validation failed",
                details={"errors": str(e), "path": source},
            ) from e

        self._configs[config.pack_id] = config
        return config

    def _load_file(self, path: Path) -> Any:
        """Load data from YAML or JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() in {".yaml", ".yml"}:
                return yaml.safe_load(f)
            elif path.suffix.lower() == ".json":
                return json.load(f)
            else:
                content = f.read()
                try:
                    return yaml.safe_load(content)
                except yaml.YAMLError:
                    return json.loads(content)

    def get_config(self, pack_id: str) -> Optional[PipelineConfig]:
        """Get a cached configuration by pack ID."""
        return self._configs.get(pack_id)

    def list_packs(self) -> list[str]:
        """List IDs of all loaded packs."""
        return list(self._configs.keys())


# =============================================================================
# Convenience Functions
# =============================================================================

def load_pipeline_pack(path: Union[str, Path]) -> PipelineConfig:
    """
    Load a pipeline pack from a file.

    Convenience function that creates a temporary loader.
    """
    loader = PipelinePackLoader()
    return loader.load(path)


def load_pipeline_pack_from_string(
    content: str,
    format: str = "yaml",
) -> PipelineConfig:
    """
    Load a pipeline pack from a string.

    Args:
        content: YAML or JSON string
        format: "yaml" or "json"
    """
    try:
        if format.lower() == "json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (ValueError, yaml.YAMLError) as e:
        raise PackLoadError(
            message=f"Failed to parse pipeline pack: {e}",
            details={"format": format, "error": str(e)},
        ) from e

    return PipelinePackLoader().load_data(data, source=f"<{format} string>")


@lru_cache()
def get_default_config() -> PipelineConfig:
    """
    Get the cached configuration from the bundled default pack.
    """
    return load_pipeline_pack(DEFAULT_PACK_PATH)
