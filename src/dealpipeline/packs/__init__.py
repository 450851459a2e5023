"""
DealPipeline Pipeline Packs

Schema validation and loading for pipeline packs.

Pipeline packs are YAML or JSON files that define the department trigger
tables, stage definitions, final-approval escalation rule and approver level
details used by the approval engine.

Usage:
    from dealpipeline.packs import load_pipeline_pack, get_default_config

    # The bundled default tables
    config = get_default_config()

    # A custom pack
    config = load_pipeline_pack("path/to/pipeline.yaml")
"""
from __future__ import annotations

from .loader import (
    DEFAULT_PACK_PATH,
    PipelinePackLoader,
    get_default_config,
    load_pipeline_pack,
    load_pipeline_pack_from_string,
    validate_reference_integrity,
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

__all__ = [
    # Version
    "SCHEMA_VERSION",
    # Loader
    "DEFAULT_PACK_PATH",
    "PipelinePackLoader",
    "get_default_config",
    "load_pipeline_pack",
    "load_pipeline_pack_from_string",
    # Validation
    "validate_pipeline_pack",
    "validate_reference_integrity",
    "check_schema_version",
    # Schemas
    "PipelinePackSchema",
    "DepartmentSchema",
    "StageSchema",
    "FinalApprovalSchema",
    "ApproverLevelSchema",
]
