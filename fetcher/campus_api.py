"""HTTP client for the campus JSON APIs (events, daily messages, dining)."""
import logging
import time
from typing import Any

import requests

logger = logging.getLogger(__name__)


class CampusApiClient:
    """Client for fetching JSON payloads from upstream campus endpoints."""
    
    HEADERS = {'Content-Type': 'application/json'}
    
    def __init__(self, timeout: int = 30, max_retries: int = 3, base_delay: float = 1):
        """
        Initialize the API client.
        
        Args:
            timeout: HTTP request timeout in seconds (default: 30)
            max_retries: Number of attempts before giving up (default: 3)
            base_delay: Initial backoff delay in seconds (default: 1)
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay
    
    def fetch_json(self, url: str) -> Any:
        """
        Fetch and decode a JSON payload with retry logic.
        
        Args:
            url: Endpoint to GET
            
        Returns:
            Parsed JSON document
            
        Raises:
            requests.RequestException: If all retry attempts fail
            ValueError: If the response body is not valid JSON
        """
        for attempt in range(self.max_retries):
            try:
                logger.info(
                    f"Fetching {url} (attempt {attempt + 1}/{self.max_retries})"
                )
                response = requests.get(
                    url,
                    headers=self.HEADERS,
                    timeout=self.timeout
                )
                response.raise_for_status()
                break
                
            except requests.RequestException as e:
                if attempt < self.max_retries - 1:
                    # Calculate exponential backoff delay
                    delay = self.base_delay * (2 ** attempt)
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{self.max_retries}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"All {self.max_retries} retry attempts failed. Last error: {e}"
                    )
                    raise
        
        try:
            return response.json()
        except ValueError as e:
            raise ValueError(f"Response from {url} is not valid JSON: {e}") from e
