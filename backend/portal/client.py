"""
HTTP client for the portal API, used by scripts and integration tests.

List reads are best-effort: a failed request is logged and an empty list is
returned, the same policy the web frontend follows. Writes raise
``PortalAPIError`` with the server's error message.
"""
import json
import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class PortalAPIError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _is_success(response) -> bool:
    return 200 <= response.status_code < 300


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or json.dumps(body)
    return str(body)


class PortalClient:
    """Thin wrapper over the REST endpoints.

    ``session`` may be any object with the ``requests.Session`` call
    interface; FastAPI's ``TestClient`` works as well.
    """

    def __init__(self, base_url: str = "http://localhost:5000", token: Optional[str] = None,
                 session=None, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, path: str, **kwargs):
        return self.session.request(method, self._url(path), headers=self._headers(),
                                    timeout=self.timeout, **kwargs)

    def _send(self, method: str, path: str, **kwargs) -> Any:
        response = self._request(method, path, **kwargs)
        if not _is_success(response):
            raise PortalAPIError(response.status_code, _error_message(response))
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _fetch_list(self, path: str, **kwargs) -> List[Any]:
        try:
            response = self._request("GET", path, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Network error fetching {path}: {e}")
            return []
        if not _is_success(response):
            logger.error(f"Failed to fetch {path}: {response.status_code} {_error_message(response)}")
            return []
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {path}: {e}")
            return []
        if isinstance(data, list):
            return data
        return [data] if data else []

    # Authentication

    def _authenticate(self, path: str, email: str, password: str, role: str) -> Dict[str, Any]:
        try:
            response = self._request("POST", path, json={"email": email, "password": password, "role": role})
        except requests.RequestException as e:
            logger.error(f"API error during {path}: {e}")
            return {"success": False, "error": "Network error or server unreachable"}

        if _is_success(response):
            data = response.json()
            self.token = data.get("token")
            return {"success": True, "data": data}
        return {"success": False, "error": _error_message(response)}

    def signup(self, email: str, password: str, role: str) -> Dict[str, Any]:
        return self._authenticate("/api/signup", email, password, role)

    def login(self, email: str, password: str, role: str) -> Dict[str, Any]:
        return self._authenticate("/api/login", email, password, role)

    # Profiles

    def fetch_profiles(self) -> List[Dict[str, Any]]:
        return self._fetch_list("/api/widgets-data")

    def add_employee(self, profile: Dict[str, Any], projects: List[Dict[str, Any]],
                     image: Optional[tuple] = None, video: Optional[tuple] = None) -> Dict[str, Any]:
        """Create a profile with projects; ``image``/``video`` are ``(filename, bytes, content_type)``."""
        form = {key: "" if value is None else str(value) for key, value in profile.items()}
        form["projects"] = json.dumps(projects)
        files = {}
        if image:
            files["image"] = image
        if video:
            files["video_file"] = video
        return self._send("POST", "/api/employees", data=form, files=files or None)

    def get_profile(self, employee_id: int) -> Dict[str, Any]:
        return self._send("GET", f"/api/edit-profile-data/{employee_id}")

    def update_profile(self, employee_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._send("PUT", f"/api/profile-Updated/{employee_id}", json=fields)

    def delete_employee(self, employee_id: int) -> Dict[str, Any]:
        return self._send("DELETE", f"/api/employees-delete/{employee_id}")

    # Projects

    def fetch_projects(self) -> List[Dict[str, Any]]:
        return self._fetch_list("/api/project-Data")

    def get_project_details(self, project_id: int) -> Dict[str, Any]:
        return self._send("GET", f"/api/projects/details/{project_id}")

    def get_project_for_edit(self, project_id: int) -> Dict[str, Any]:
        return self._send("GET", f"/api/Edit-Project-data/{project_id}")

    def update_project(self, project_id: int, project: Dict[str, Any],
                       milestones: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._send("PUT", f"/api/project/{project_id}",
                          json={"project": project, "milestones": milestones})

    def delete_project(self, project_id: int) -> Dict[str, Any]:
        return self._send("DELETE", f"/api/project-delete/{project_id}")

    # Deliverables

    def fetch_deliverables(self) -> List[Dict[str, Any]]:
        return self._fetch_list("/api/deliverable-data")

    def fetch_deliverable_view(self, deliverable_id: Optional[int]) -> List[Dict[str, Any]]:
        if not deliverable_id:
            logger.error("A deliverable id is required")
            return []
        return self._fetch_list("/api/deliverable-view", params={"id": deliverable_id})

    def update_deliverable(self, deliverable_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._send("PUT", f"/api/deliverable-updated/{deliverable_id}", json=payload)

    def delete_deliverable(self, deliverable_id: int) -> Dict[str, Any]:
        return self._send("DELETE", f"/api/deliverable-delete/{deliverable_id}")

    # Renewals

    def fetch_renewals(self) -> List[Dict[str, Any]]:
        return self._fetch_list("/api/renewals-data")

    def add_renewal(self, renewal: Dict[str, Any]) -> Dict[str, Any]:
        return self._send("POST", "/api/renewals", json=renewal)

    def update_renewal(self, renewal_id: int, renewal: Dict[str, Any]) -> Dict[str, Any]:
        return self._send("PUT", f"/api/renewals-updated/{renewal_id}", json=renewal)

    def delete_renewal(self, renewal_id: int) -> None:
        self._send("DELETE", f"/api/renewal-delete/{renewal_id}")
