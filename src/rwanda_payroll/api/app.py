"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rwanda_payroll import __version__
from rwanda_payroll.api.routes import health_router, payroll_router, tax_settings_router
from rwanda_payroll.calculators.tax_calculator import ComputationAnomaly
from rwanda_payroll.calculators.tax_config import ConfigurationError
from rwanda_payroll.calculators.types import InvalidPayrollInputError
from rwanda_payroll.config import settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Rwanda Payroll Tax Engine API",
        description="PAYE, RSSB, RAMA and CBHI payroll calculation",
        version=__version__,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        """Reject malformed tax settings."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": str(exc),
                "code": "INVALID_TAX_CONFIGURATION",
                "context": {"errors": exc.errors},
            },
        )

    @app.exception_handler(InvalidPayrollInputError)
    async def payroll_input_error_handler(
        request: Request, exc: InvalidPayrollInputError
    ) -> JSONResponse:
        """Reject inconsistent salary amounts."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": str(exc),
                "code": "INVALID_PAYROLL_INPUT",
                "context": {"employee_id": exc.employee_id, "errors": exc.errors},
            },
        )

    @app.exception_handler(ComputationAnomaly)
    async def computation_anomaly_handler(
        request: Request, exc: ComputationAnomaly
    ) -> JSONResponse:
        """Report negative net pay for investigation."""
        logger.warning("Computation anomaly: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": str(exc),
                "code": "NEGATIVE_NET_PAY",
                "context": {
                    "employee_id": exc.employee_id,
                    "gross_salary": str(exc.gross_salary),
                    "net_pay": str(exc.net_pay),
                },
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(payroll_router, prefix="/api/v1")
    app.include_router(tax_settings_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
