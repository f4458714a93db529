"""
Chat-completions API client

Sends a system + user message pair to an OpenAI-compatible endpoint
(DeepSeek by default) and returns the generated text. No retries: callers
decide whether a failure is absorbed or fatal.
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional

import requests

from .config import DEFAULT_API_URL, DEFAULT_MODEL, DEFAULT_TEMPERATURE
from .exceptions import TransportError, MalformedResponseError

logger = logging.getLogger(__name__)


class LLMClient:
    """Client for an OpenAI-compatible chat-completions endpoint"""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        endpoint: str = DEFAULT_API_URL,
        temperature: Optional[float] = DEFAULT_TEMPERATURE,
        timeout: Optional[float] = None
    ):
        """
        Initialize LLM client

        Args:
            api_key: Bearer token for the backend
            model: Default model identifier (overridable per call)
            endpoint: Full chat-completions URL
            temperature: Sampling temperature, omitted from the payload when None
            timeout: Optional request timeout in seconds (None waits indefinitely)
        """
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint
        self.temperature = temperature
        self.timeout = timeout

    def build_payload(self, system_prompt: str, user_prompt: str, model_id: Optional[str] = None) -> Dict[str, Any]:
        """Build the request body: {model, messages, temperature?}"""
        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        payload: Dict[str, Any] = {
            "model": model_id or self.model,
            "messages": messages,
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        return payload

    def complete(self, system_prompt: str, user_prompt: str, model_id: Optional[str] = None) -> str:
        """
        Call the backend and return the generated text

        Args:
            system_prompt: Persona / instruction block (system role)
            user_prompt: Task content (user role)
            model_id: Model identifier, defaults to the client's model

        Returns:
            Content of choices[0].message.content, stripped

        Raises:
            TransportError: Network failure or non-2xx status
            MalformedResponseError: Body is not JSON or lacks the expected fields
        """
        payload = self.build_payload(system_prompt, user_prompt, model_id)

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        logger.info(f"Calling LLM: {payload['model']}")
        logger.debug(f"Prompt size: {len(user_prompt)} characters")

        start_time = time.time()

        try:
            response = requests.post(
                self.endpoint,
                headers=headers,
                json=payload,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"❌ API request failed: {type(e).__name__}: {e}")
            raise TransportError(f"LLM API request failed: {str(e)}")

        elapsed_time = time.time() - start_time

        if not 200 <= response.status_code < 300:
            logger.error(f"❌ HTTP error {response.status_code}")
            logger.error(f"Response body: {response.text[:1000]}")
            raise TransportError(
                f"LLM API HTTP error ({response.status_code}): {_error_detail(response)}",
                status_code=response.status_code
            )

        try:
            result = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"❌ Failed to parse API response as JSON: {e}")
            logger.error(f"Response text: {response.text[:1000]}")
            raise MalformedResponseError(f"Invalid JSON response from API: {str(e)}")

        content = _extract_content(result)

        logger.info(f"✅ Received {len(content)} characters in {elapsed_time:.2f} seconds")

        if isinstance(result, dict) and 'usage' in result:
            usage = result['usage'] or {}
            logger.debug(
                f"Token usage - Prompt: {usage.get('prompt_tokens', 'N/A')}, "
                f"Completion: {usage.get('completion_tokens', 'N/A')}, "
                f"Total: {usage.get('total_tokens', 'N/A')}"
            )

        return content


def _extract_content(result: Any) -> str:
    """Pull choices[0].message.content out of a decoded response body"""
    if not isinstance(result, dict):
        raise MalformedResponseError("Invalid API response format: body is not an object")

    choices = result.get('choices')
    if not choices or not isinstance(choices, list):
        logger.error(f"Invalid API response format: {str(result)[:500]}")
        raise MalformedResponseError("Invalid API response format: missing 'choices'")

    message = choices[0].get('message') if isinstance(choices[0], dict) else None
    content = message.get('content') if isinstance(message, dict) else None

    if not isinstance(content, str):
        logger.error(f"Invalid API response format: {str(result)[:500]}")
        raise MalformedResponseError("Invalid API response format: missing 'choices[0].message.content'")

    return content.strip()


def _error_detail(response: requests.Response) -> str:
    """Best-effort error message from a failed response"""
    try:
        body = response.json()
        error = body.get('error') if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get('message'):
            return str(error['message'])
    except ValueError:
        pass
    return response.reason or response.text[:200]
