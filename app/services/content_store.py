import os
import re
import json
import glob
import logging
from typing import Any, Dict, List, Optional
from app.core import config

logger = logging.getLogger(__name__)

CONTENT_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class ContentStore:
    """Read-only access to JSON content files stored as <base_dir>/<id>.json."""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = base_dir or config.CONTENT_DIR

    def _get_content_path(self, content_id: str) -> str:
        return os.path.join(self.base_dir, f"{content_id}.json")

    def is_valid_id(self, content_id: str) -> bool:
        return bool(content_id) and CONTENT_ID_RE.match(content_id) is not None

    def list_ids(self) -> List[str]:
        """Lists ids of every JSON file in the base directory."""
        if not os.path.isdir(self.base_dir):
            logger.warning(f"Content directory {self.base_dir} not found.")
            return []
        files = glob.glob(os.path.join(self.base_dir, "*.json"))
        ids = [os.path.splitext(os.path.basename(f))[0] for f in files]
        return sorted(i for i in ids if self.is_valid_id(i))

    def load_content(self, content_id: str) -> Optional[Dict[str, Any]]:
        """Returns the parsed JSON object for content_id, or None if it cannot be loaded."""
        if not self.is_valid_id(content_id):
            logger.warning(f"Rejected content id {content_id!r}")
            return None

        path = self._get_content_path(content_id)
        if not os.path.exists(path):
            logger.info(f"Content {content_id} not found at {path}")
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Error reading content {content_id} from {path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Content {content_id} is not a JSON object")
            return None
        return data
