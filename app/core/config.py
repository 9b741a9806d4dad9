import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

# Site Configuration
SITE_NAME = os.getenv("SITE_NAME", "Interview Prep")

# Content Configuration
CONTENT_DIR = os.getenv("CONTENT_DIR", os.path.join(os.getcwd(), "data", "trees"))

# Server Configuration
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
