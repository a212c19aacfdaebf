"""
Event Generator Runner

Entry point for running the API server with the periodic generator.
"""
import uvicorn
import logging

from .config import Config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("eventgen")


def run():
    """Run the event generator API"""
    logger.info(f"Starting event generator on {Config.API_HOST}:{Config.API_PORT}")

    uvicorn.run(
        "eventgen.app:app",
        host=Config.API_HOST,
        port=Config.API_PORT,
        reload=Config.DEBUG
    )


if __name__ == "__main__":
    run()
