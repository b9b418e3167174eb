"""Entry point for running the preview API with uvicorn."""

import uvicorn

from rwanda_payroll.config import settings


def main() -> None:
    """Run the application."""
    uvicorn.run(
        "rwanda_payroll.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
