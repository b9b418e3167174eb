"""API routes."""

from rwanda_payroll.api.routes.health import router as health_router
from rwanda_payroll.api.routes.payroll import router as payroll_router
from rwanda_payroll.api.routes.tax_settings import router as tax_settings_router

__all__ = ["health_router", "payroll_router", "tax_settings_router"]
