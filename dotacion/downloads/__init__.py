# dotacion/downloads/__init__.py

from .registry import ReportParam, ReportRegistry, ReportTemplate, registry

__all__ = ["ReportParam", "ReportRegistry", "ReportTemplate", "registry"]
