"""Client for the remote run server."""

from __future__ import annotations

import random
import time
from typing import Any

import httpx

from .config import config
from .exceptions import (
    NoResponseError,
    RemoteAPIError,
    RemoteConfigError,
    RemoteInvalidResponseError,
    RemoteNetworkError,
)


class RemoteClient:
    """Client for the remote server's JSON request/response protocol.

    Every call is a single HTTP POST to ``http://<host>:<port>`` whose JSON
    body carries an ``action`` field plus the action's parameters.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        max_retries: int = 2,
        retry_delay: float = 0.5,
        timeout: float = 30.0,
    ):
        """Initialize the remote client.

        Args:
            host: Hostname or IP address of the remote server
            port: Server port (uses config if not provided)
            max_retries: Maximum number of retry attempts (default: 2)
            retry_delay: Initial delay between retries in seconds (default: 0.5)
            timeout: Request timeout in seconds (default: 30.0)
        """
        if not host:
            raise RemoteConfigError("Remote host not configured")

        self.host = host
        self.port = port or config.remote_port
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout

        self._client: httpx.Client | None = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(timeout=httpx.Timeout(self.timeout))
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> RemoteClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate delay before next retry using exponential backoff with jitter."""
        base_delay = self.retry_delay * (2**attempt)
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return base_delay + jitter

    @staticmethod
    def _parse_json(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteInvalidResponseError(
                "Invalid JSON response from server"
            ) from e

    def _request(self, action: str, **fields: Any) -> dict[str, Any]:
        """Send one action to the server with retry logic for network errors.

        Args:
            action: Protocol action name
            **fields: Action parameters

        Returns:
            Decoded JSON response

        Raises:
            NoResponseError: If the server could not be reached after all retries
            RemoteAPIError: If the server answered with an HTTP error
        """
        payload = {"action": action, **fields}
        last_exception: Exception | None = None
        client = self._get_client()

        for attempt in range(self.max_retries + 1):
            try:
                response = client.post(self.base_url, json=payload)
                response.raise_for_status()
                data = self._parse_json(response)
                if not isinstance(data, dict):
                    raise RemoteInvalidResponseError(
                        f"Unexpected response for '{action}': {data!r}"
                    )
                return data

            except httpx.HTTPStatusError as e:
                # A well-formed {success: false} body is an answer, not a failure
                try:
                    body = e.response.json()
                except ValueError:
                    body = None
                if isinstance(body, dict) and "success" in body:
                    return body

                status_code = e.response.status_code
                error = RemoteAPIError(f"Request failed with status {status_code}")
                if 500 <= status_code < 600 and attempt < self.max_retries:
                    last_exception = error
                    time.sleep(self._calculate_retry_delay(attempt))
                    continue
                raise error from e
            except RemoteAPIError:
                raise
            except httpx.TimeoutException as e:
                last_exception = NoResponseError(f"No response from {self.base_url}: {e}")
            except httpx.RequestError as e:
                last_exception = RemoteNetworkError(f"Network error: {e}")

            if attempt < self.max_retries:
                time.sleep(self._calculate_retry_delay(attempt))

        if isinstance(last_exception, NoResponseError):
            raise last_exception
        if last_exception is not None:
            raise NoResponseError(str(last_exception)) from last_exception
        raise NoResponseError("Request failed after all retry attempts")

    def check_folder(self, folder_name: str) -> dict[str, Any]:
        """Ensure a workspace folder exists on the server.

        Args:
            folder_name: Name of the workspace folder

        Returns:
            ``{"success": True, "folderPath": ...}`` or
            ``{"success": False, "error": ...}``
        """
        return self._request("checkFolder", folderName=folder_name)

    def run_code(self, folder_name: str, file_path: str, content: str) -> dict[str, Any]:
        """Ask the server to execute a file of a synced workspace.

        Args:
            folder_name: Name of the workspace folder
            file_path: Path of the file relative to the workspace root
            content: Current editor content of the file

        Returns:
            ``{"success", "output", "error", "returncode"}`` as sent by the server
        """
        return self._request(
            "runCode", folderName=folder_name, filePath=file_path, content=content
        )
