"""Pydantic models for configuration, containers, templates and run outcomes."""

from pvelxc.models.config import LxcConfig
from pvelxc.models.container import ContainerSpec
from pvelxc.models.template import TemplateRef
from pvelxc.models.report import StepStatus, StepOutcome, RunSummary

__all__ = [
    "LxcConfig",
    "ContainerSpec",
    "TemplateRef",
    "StepStatus",
    "StepOutcome",
    "RunSummary",
]
