import httpx
import logging
from typing import Dict, Any, List, Optional

from prioritizer.config import (
    TASK_API_BASE_URL,
    TASK_API_KEY,
    TASK_API_KEY_HEADER,
    TASK_API_KEY_PREFIX,
    TASK_API_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

FINISHED_STATUSES = {"completed", "done"}


class TaskSourceError(RuntimeError):
    """The task store could not be reached or returned something unusable."""


class TaskLoader:
    """
    Read-only client for the task store (the Node backend). Forwards the
    caller's credentials so the store only returns the caller's tasks.
    """

    def __init__(self, incoming_headers: Optional[Dict[str, str]] = None, base_url: str = TASK_API_BASE_URL):
        self.base_url = base_url.rstrip("/")

        # Normalize incoming headers
        self.incoming_headers = {}
        if incoming_headers:
            for k, v in incoming_headers.items():
                if k.lower() == "authorization":
                    self.incoming_headers["Authorization"] = v
                elif k.lower() == "cookie":
                    self.incoming_headers["Cookie"] = v
                elif k.lower() == "x-user-id":
                    self.incoming_headers["X-User-Id"] = v
                else:
                    self.incoming_headers[k] = v

    def _build_headers(self) -> Dict[str, str]:
        headers = dict(self.incoming_headers)
        if TASK_API_KEY and "Authorization" not in headers:
            headers[TASK_API_KEY_HEADER] = f"{TASK_API_KEY_PREFIX}{TASK_API_KEY}"
        return headers

    @staticmethod
    def _extract_tasks(data: Any) -> List[Dict[str, Any]]:
        """The store answers with a bare list, or wraps it in 'tasks' / 'data'."""
        if isinstance(data, dict):
            if isinstance(data.get("tasks"), list):
                data = data["tasks"]
            elif isinstance(data.get("data"), list):
                data = data["data"]
        if not isinstance(data, list):
            raise TaskSourceError(f"Unexpected response structure for tasks: {type(data).__name__}")
        return [t for t in data if isinstance(t, dict)]

    async def fetch_open_tasks(self) -> List[Dict[str, Any]]:
        """Returns the raw task records that are not finished yet."""
        url = f"{self.base_url}/tasks"
        logger.info("🚀 Fetching tasks from: %s", url)

        try:
            async with httpx.AsyncClient() as client:
                res = await client.get(url, timeout=TASK_API_TIMEOUT_SECONDS, headers=self._build_headers())
                logger.info("✅ [TASKS API RESPONSE] Status: %s", res.status_code)
                res.raise_for_status()
                data = res.json()
        except httpx.HTTPError as e:
            raise TaskSourceError(f"Failed to fetch tasks: {e}") from e
        except ValueError as e:
            raise TaskSourceError(f"Task store returned invalid JSON: {e}") from e

        tasks = self._extract_tasks(data)
        open_tasks = [
            t for t in tasks
            if str(t.get("status") or "").lower() not in FINISHED_STATUSES
        ]
        logger.info("📦 %d tasks loaded, %d still open", len(tasks), len(open_tasks))
        return open_tasks
