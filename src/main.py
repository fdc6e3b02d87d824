"""Main application entry point.

Runs the NiceGUI dashboard (port 8080). The prediction service it talks to is
configured with FASTAPI_URL. Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Application entry point."""
    from nicegui import app, ui

    from src.client.api_client import close_api_client
    from src.config import get_client_config
    from src.ui.dashboard_page import dashboard_page  # noqa: F401 - Registers the page

    config = get_client_config()
    app.on_shutdown(close_api_client)

    port = int(os.getenv("PORT", "8080"))
    logger.info(f"Prediction service at {config.base_url}")
    logger.info(f"Dashboard available at http://localhost:{port}/")

    ui.run(
        title="AI Dashboard",
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    main()
