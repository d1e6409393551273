"""Tool workflows: one orchestrator per tool."""

from .chat import ChatAssistantWorkflow
from .image_diagnosis import ImageDiagnosisWorkflow
from .inspection import InspectionChecklistWorkflow
from .maintenance_schedule import MaintenanceScheduleWorkflow
from .pathology_plan import PathologyActionPlanWorkflow
from .tech_diagnosis import TechDiagnosisWorkflow

__all__ = [
    "ChatAssistantWorkflow",
    "ImageDiagnosisWorkflow",
    "InspectionChecklistWorkflow",
    "MaintenanceScheduleWorkflow",
    "PathologyActionPlanWorkflow",
    "TechDiagnosisWorkflow",
]
