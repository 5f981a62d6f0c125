import os
import sys
from loguru import logger
# load environment variables from .env file if it exists
from dotenv import load_dotenv
load_dotenv()

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {extra} - {message}"


class JsonLogger:
    def __init__(self):
        self.logger = logger
        self._configure_logger()

    def _configure_logger(self):
        self.logger.remove()  # Remove default handler

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        self.logger.add(
            sys.stdout,
            level=log_level,
            format=LOG_FORMAT,
            serialize=False,
            enqueue=True  # Use a queue for non-blocking logging
        )
        # Optionally, add a file handler for local debugging
        if os.getenv("LOG_TO_FILE", "false").lower() == "true":
            log_file_path = os.getenv("LOG_FILE_PATH", "app.log")
            self.logger.add(
                log_file_path,
                level=log_level,
                format=LOG_FORMAT,
                serialize=True,
                rotation="10 MB",  # Rotate file after 10 MB
                compression="zip",
                enqueue=True
            )
            self.logger.debug(f"Logging to file {log_file_path} is enabled.")

# Initialize the logger
json_logger = JsonLogger().logger
