"""
Entry point for the CRUD Backend
"""

import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from crud_backend.app import create_app
from crud_backend.config.logging_config import setup_logging
from crud_backend.config.settings import load_settings

settings = load_settings()

# Configure logging
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = create_app(settings)

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting {settings.app_name} on {settings.get_addr()}")
    uvicorn.run(app, host=settings.host, port=settings.port)
