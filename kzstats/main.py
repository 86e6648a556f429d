import logging
import traceback

import uvicorn

from kzstats.api.app import create_app
from kzstats.config import Config
from kzstats.utils.logger import setup_logger


def main():
    """Main entry point"""
    Config.validate()
    logger = setup_logger("kzstats")
    logger.info(f"Serving stats API on {Config.API_HOST}:{Config.API_PORT}")

    try:
        uvicorn.run(
            create_app(),
            host=Config.API_HOST,
            port=Config.API_PORT,
            log_level="debug" if Config.DEBUG else Config.LOG_LEVEL.lower(),
        )
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        traceback.print_exc()
        raise


if __name__ == "__main__":
    main()
