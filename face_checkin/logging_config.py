"""
Logging configuration for the face check-in client
"""

import logging
import logging.handlers
from datetime import datetime
from pathlib import Path

from . import config


def setup_logging(log_level=None, log_dir=None, max_log_size=10*1024*1024, backup_count=5):
    """
    Set up logging for the client.

    Args:
        log_level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the rotating log files
        max_log_size: Maximum size of one log file (bytes)
        backup_count: Number of rotated files to keep
    """

    log_dir = Path(log_dir or config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    level_name = (log_level or config.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / 'checkin_client.log',
        maxBytes=max_log_size,
        backupCount=backup_count,
        encoding='utf-8'
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    error_handler = logging.handlers.RotatingFileHandler(
        log_dir / 'errors.log',
        maxBytes=max_log_size,
        backupCount=backup_count,
        encoding='utf-8'
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Drop handlers from a previous setup_logging() call
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(error_handler)

    for name in ('camera', 'api', 'workflow'):
        logging.getLogger(name).setLevel(log_level)

    root_logger.info("=" * 50)
    root_logger.info("FACE CHECK-IN CLIENT STARTUP")
    root_logger.info(f"Timestamp: {datetime.now().isoformat()}")
    root_logger.info(f"Log Level: {logging.getLevelName(log_level)}")
    root_logger.info(f"Log Directory: {log_dir.absolute()}")
    root_logger.info("=" * 50)
    return root_logger


class CaptureLogger:
    """Logger for camera device and capture events"""

    def __init__(self):
        self.logger = logging.getLogger('camera')

    def log_device_acquired(self, index, width, height):
        self.logger.info(f"Camera acquired - Index: {index}, Resolution: {width}x{height}")

    def log_device_error(self, index, error_message):
        self.logger.error(f"Camera unavailable - Index: {index}, Error: {error_message}")

    def log_device_released(self, index):
        self.logger.info(f"Camera released - Index: {index}")

    def log_capture(self, size_bytes):
        self.logger.debug(f"Frame captured - JPEG size: {size_bytes} bytes")

    def log_retake(self):
        self.logger.debug("Captured frame discarded (retake)")


class GatewayLogger:
    """Logger for calls to the verification service"""

    def __init__(self):
        self.logger = logging.getLogger('api')

    def log_request(self, method, endpoint):
        self.logger.info(f"API Request - {method} {endpoint}")

    def log_response(self, endpoint, status_code, duration=None):
        duration_info = f", Duration: {duration:.3f}s" if duration is not None else ""
        self.logger.info(f"API Response - {endpoint}, Status: {status_code}{duration_info}")

    def log_error(self, endpoint, error_message, status_code=None):
        status_info = f", Status: {status_code}" if status_code is not None else ""
        self.logger.error(f"API Error - {endpoint}{status_info}, Error: {error_message}")


class WorkflowLogger:
    """Logger for submission lifecycle of the enroll / check-in screens"""

    def __init__(self):
        self.logger = logging.getLogger('workflow')

    def log_submission(self, workflow, fields):
        self.logger.info(f"Submission started - Workflow: {workflow}, Fields: {sorted(fields)}")

    def log_ignored_submission(self, workflow):
        self.logger.warning(f"Submission ignored, request already in flight - Workflow: {workflow}")

    def log_validation_error(self, workflow, field):
        self.logger.info(f"Validation failed - Workflow: {workflow}, Field: {field}")

    def log_outcome(self, workflow, state, message=None):
        message_info = f", Message: {message}" if message else ""
        self.logger.info(f"Submission finished - Workflow: {workflow}, State: {state}{message_info}")

    def log_navigation(self, workflow, route, delay_ms=None):
        if delay_ms is None:
            self.logger.info(f"Navigating - Workflow: {workflow}, Route: {route}")
        else:
            self.logger.debug(f"Navigation armed - Workflow: {workflow}, Route: {route}, Delay: {delay_ms}ms")


# Global logger instances
capture_logger = CaptureLogger()
gateway_logger = GatewayLogger()
workflow_logger = WorkflowLogger()
