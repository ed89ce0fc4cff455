import time
from typing import Any, Dict, List, Optional, Union

import requests


class SimulatorAPIError(Exception):
    """Custom exception for API errors."""
    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data

    def __str__(self):
        return f"SimulatorAPIError: {self.args[0]} (Status Code: {self.status_code})"


class NeonBitClient:
    """
    Python client for the NeonBit simulator's HTTP API.
    """
    DEFAULT_TIMEOUT = 10  # seconds

    def __init__(self, base_url: str = "http://localhost:8765"):
        """
        Initializes the client.

        Args:
            base_url: The base URL of the simulator's HTTP API.
        """
        self.base_url = base_url.rstrip('/')
        self.session = requests.Session()

    def _request(self, method: str, endpoint: str, params: Optional[Dict[str, Any]] = None,
                 json_data: Optional[Dict[str, Any]] = None,
                 timeout: Optional[Union[float, tuple]] = DEFAULT_TIMEOUT) -> Dict[str, Any]:
        """
        Helper method to make HTTP requests to the API.

        Args:
            method: HTTP method (GET, POST, etc.).
            endpoint: API endpoint path (e.g., "/state").
            params: URL parameters for GET requests.
            json_data: JSON payload for POST requests.
            timeout: Request timeout in seconds.

        Returns:
            The JSON response from the API as a dictionary.

        Raises:
            SimulatorAPIError: If the API returns an error or network issues occur.
        """
        full_url = self.base_url + endpoint
        headers = {"Accept": "application/json"}
        if json_data is not None:
            headers["Content-Type"] = "application/json"

        try:
            response = self.session.request(
                method,
                full_url,
                params=params,
                json=json_data,
                headers=headers,
                timeout=timeout
            )
            response.raise_for_status()  # Raises HTTPError for 4xx/5xx responses
            if response.status_code == 204:  # No Content
                return {}
            return response.json()
        except requests.exceptions.HTTPError as e:
            response_data = None
            try:
                response_data = e.response.json() if e.response is not None else None
            except requests.exceptions.JSONDecodeError:
                pass  # Keep response_data as None if it's not valid JSON
            raise SimulatorAPIError(
                f"HTTP error occurred: {e}",
                status_code=e.response.status_code if e.response is not None else None,
                response_data=response_data
            ) from e
        except requests.exceptions.JSONDecodeError as e:
            raise SimulatorAPIError(f"Failed to decode JSON response: {e}") from e
        except requests.exceptions.RequestException as e:
            # For connection errors, timeouts, etc.
            raise SimulatorAPIError(f"Request failed: {e}") from e

    # --- Read endpoints ---
    def get_root_info(self) -> Dict[str, Any]:
        return self._request("GET", "/")

    def get_health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")

    def get_state(self) -> Dict[str, Any]:
        """Retrieves mode, pattern, value, run state and history."""
        return self._request("GET", "/state")

    def get_history(self, limit: Optional[int] = None) -> List[float]:
        """Returns history samples, newest first."""
        params = {"limit": limit} if limit is not None else None
        return self._request("GET", "/history", params=params)["history"]

    def get_truth_table(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/truth-table")["rows"]

    def get_snapshot(self) -> Dict[str, Any]:
        return self._request("GET", "/snapshot")

    def get_config(self) -> Dict[str, Any]:
        return self._request("GET", "/config")

    # --- Commands ---
    def select_mode(self, mode: str) -> Dict[str, Any]:
        """
        Switches mode. The register resets to the new mode's default.

        Args:
            mode: "ANIMATION", "MANUAL" or "COUNTER".
        """
        return self._request("POST", "/mode", json_data={"mode": mode.upper()})

    def toggle_bit(self, index: int) -> Dict[str, Any]:
        return self._request("POST", f"/toggle/{index}")

    def set_pattern(self, text: str) -> Dict[str, Any]:
        return self._request("POST", "/pattern", json_data={"text": text})

    def step(self) -> Dict[str, Any]:
        return self._request("POST", "/step")

    def navigate(self, direction: int) -> Dict[str, Any]:
        return self._request("POST", "/navigate", json_data={"direction": direction})

    def select_digit(self, digit: int) -> Dict[str, Any]:
        return self._request("POST", f"/digit/{digit}")

    def reset(self) -> Dict[str, Any]:
        return self._request("POST", "/reset")

    def set_running(self, running: bool) -> Dict[str, Any]:
        return self._request("POST", "/run", json_data={"running": running})

    def set_interval(self, interval_ms: int) -> Dict[str, Any]:
        return self._request("POST", "/interval", json_data={"interval_ms": interval_ms})

    def export(self) -> Dict[str, Any]:
        """Asks the simulator to write a snapshot file on its side."""
        return self._request("POST", "/export")

    def update_parameter(self, name: str, value: Any) -> Dict[str, Any]:
        return self._request("POST", f"/config/parameters/{name}", json_data={"value": value})

    # --- Helpers ---
    def wait_for_value(self, value: int, timeout: float = 10.0, poll_interval: float = 0.1) -> bool:
        """
        Polls /state until the register shows `value`.

        Returns:
            True if the value was seen before the timeout, False otherwise.
        """
        start_time = time.time()
        while time.time() - start_time < timeout:
            if self.get_state().get("value") == value:
                return True
            time.sleep(poll_interval)
        return False

    def close(self):
        """Closes the underlying requests session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
