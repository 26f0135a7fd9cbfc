# config.py - Configuration and constants for the face check-in client

import os

from dotenv import load_dotenv

load_dotenv()

# Verification service
API_BASE_URL = os.getenv('API_BASE_URL', 'http://localhost:8080').rstrip('/')
API_TIMEOUT = float(os.getenv('API_TIMEOUT', '30'))
API_TOKEN = os.getenv('API_TOKEN') or None

# Camera configuration
CAMERA_INDEX = int(os.getenv('CAMERA_INDEX', '0'))
FRONT_CAMERA_INDEX = int(os.getenv('FRONT_CAMERA_INDEX', str(CAMERA_INDEX)))
REAR_CAMERA_INDEX = int(os.getenv('REAR_CAMERA_INDEX', '1'))
CAMERA_FACING_MODE = os.getenv('CAMERA_FACING_MODE', 'user')
CAMERA_WIDTH = int(os.getenv('CAMERA_WIDTH', '640'))
CAMERA_HEIGHT = int(os.getenv('CAMERA_HEIGHT', '480'))
CAMERA_WARMUP_FRAMES = int(os.getenv('CAMERA_WARMUP_FRAMES', '3'))
CAMERA_BUFFER_SIZE = int(os.getenv('CAMERA_BUFFER_SIZE', '2'))
JPEG_QUALITY = max(1, min(100, int(os.getenv('JPEG_QUALITY', '92'))))

# Workflow timing (milliseconds)
CHECKIN_REDIRECT_MS = int(os.getenv('CHECKIN_REDIRECT_MS', '3000'))
ENROLL_REDIRECT_MS = int(os.getenv('ENROLL_REDIRECT_MS', '2000'))
LANDING_ROUTE = os.getenv('LANDING_ROUTE', '/')

# Multipart upload filenames
FACE_IMAGE_FILENAME = 'face.jpg'
SELFIE_IMAGE_FILENAME = 'selfie.jpg'

# Localisation
APP_LANGUAGE = os.getenv('APP_LANGUAGE', 'id')

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_DIR = os.getenv('LOG_DIR', 'logs')
