"""Ollama HTTP renderer for the chat pipeline.

``OllamaRenderer`` is a thin, asynchronous wrapper around the Ollama
``/api/chat`` endpoint.  It is the only place in the assistant that talks to
the AI model.

Async
-----
The pipeline runs on a single asyncio event loop and handlers for different
players interleave while one of them waits on the model.  The renderer
therefore uses ``httpx.AsyncClient`` and ``render`` is a coroutine.

A client can be injected (tests, or a shared connection pool owned by the
transport).  Without one, each call opens a short-lived client so the
renderer holds no sockets between requests.

Failure contract
----------------
``render`` returns ``None`` on any network-level failure (timeout,
connection error, non-2xx status) and on a malformed or empty body.  It
never raises for those cases; the pipeline maps ``None`` onto its local
fallback reply.
"""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

# Temperature used when none is configured.
_DEFAULT_TEMPERATURE = 0.7

# Two short tagged lines; leave headroom for chatty models.
_DEFAULT_NUM_PREDICT = 256


class OllamaRenderer:
    """Asynchronous renderer that calls the Ollama ``/api/chat`` endpoint.

    One instance is created per pipeline and reused for every message.

    Attributes:
        _api_endpoint:  Full ``/api/chat`` URL.
        _model:         Ollama model tag (e.g. ``"gemma2:2b"``).
        _timeout:       HTTP request timeout in seconds.
        _temperature:   Sampling temperature.
        _client:        Optional injected ``httpx.AsyncClient``.
    """

    def __init__(
        self,
        *,
        api_endpoint: str,
        model: str,
        timeout_seconds: float,
        temperature: float = _DEFAULT_TEMPERATURE,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the renderer.

        Args:
            api_endpoint:    Full Ollama ``/api/chat`` URL.
            model:           Ollama model tag.
            timeout_seconds: HTTP request timeout.
            temperature:     Sampling temperature.
            client:          Client to reuse instead of opening one per call.
        """
        self._api_endpoint = api_endpoint
        self._model = model
        self._timeout = timeout_seconds
        self._temperature = temperature
        self._client = client

    @property
    def model(self) -> str:
        return self._model

    async def render(self, prompt: str) -> str | None:
        """Call Ollama and return the raw response content.

        Args:
            prompt: The fully composed prompt, sent as a single user turn.

        Returns:
            Raw model output on success, ``None`` on failure.
        """
        payload = self._build_payload(prompt)

        try:
            if self._client is not None:
                response = await self._client.post(
                    self._api_endpoint, json=payload, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._api_endpoint, json=payload)
            response.raise_for_status()
            data = response.json()
            content = data.get("message", {}).get("content", "")
            return content.strip() or None

        except httpx.TimeoutException:
            logger.warning(
                "OllamaRenderer: request timed out after %.1fs (endpoint=%s)",
                self._timeout,
                self._api_endpoint,
            )
            return None
        except httpx.ConnectError:
            logger.warning("OllamaRenderer: cannot connect to Ollama at %s", self._api_endpoint)
            return None
        except httpx.HTTPError as exc:
            logger.error("OllamaRenderer: request failed: %s", exc)
            return None
        except (ValueError, AttributeError) as exc:
            logger.error("OllamaRenderer: malformed response body: %s", exc)
            return None

    def _build_payload(self, prompt: str) -> dict:
        """Construct the Ollama ``/api/chat`` request payload.

        ``stream`` is always ``False`` so the reply arrives as a single JSON
        object.
        """
        return {
            "model": self._model,
            "stream": False,
            "messages": [{"role": "user", "content": prompt}],
            "options": {
                "temperature": self._temperature,
                "num_predict": _DEFAULT_NUM_PREDICT,
            },
        }
