"""DOCX template engine - turn placeholder templates into filled documents."""

from .errors import (
    CollaboratorError,
    DocumentDecodeError,
    ProcessingError,
    TemplateEngineError,
)
from .pipeline import (
    DetectionResult,
    PipelineResult,
    ProcessingMode,
    TemplatePipeline,
    detect_slots,
    inject_and_finish,
    run_pipeline,
)
from .validator import Violation, validate, validate_package

__all__ = [
    "CollaboratorError",
    "DetectionResult",
    "DocumentDecodeError",
    "PipelineResult",
    "ProcessingError",
    "ProcessingMode",
    "TemplateEngineError",
    "TemplatePipeline",
    "Violation",
    "detect_slots",
    "inject_and_finish",
    "run_pipeline",
    "validate",
    "validate_package",
]
