import logging
from typing import Any, Dict, List, Optional

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from aria.core.config import settings
from aria.core.exceptions import AIKillSwitchError, ParseError, UpstreamError
from aria.core.json_extract import extract_json

logger = logging.getLogger(__name__)

class AIDomain:
    CONTENT = "content"
    GOALS = "goals"
    BEHAVIORS = "behaviors"
    COMPLIANCE = "compliance"
    GENERAL = "general"

class AIOrchestrator:
    @staticmethod
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type((requests.exceptions.Timeout, requests.exceptions.ConnectionError)),
        reraise=True
    )
    def _post(payload: Dict[str, Any]) -> requests.Response:
        return requests.post(
            url=settings.ai.api_url,
            headers={
                "x-api-key": settings.ai.anthropic_api_key,
                "anthropic-version": settings.ai.api_version,
                "Content-Type": "application/json",
            },
            json=payload,
            timeout=settings.ai.timeout
        )

    @classmethod
    def _do_call(
        cls,
        messages: List[Dict[str, str]],
        model_name: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ) -> str:
        """Internal method to perform the actual API call; transport errors are retried."""
        logger.info(f"Calling AI Model: {model_name}")

        payload = {
            "model": model_name,
            "max_tokens": max_tokens or settings.ai.max_tokens,
            "messages": messages,
            "temperature": settings.ai.temperature if temperature is None else temperature,
        }
        if system:
            payload["system"] = system

        try:
            response = cls._post(payload)
            response.raise_for_status()
        except requests.exceptions.Timeout:
            logger.error("AI service timeout.")
            raise UpstreamError("AI service reached timeout limit.")
        except requests.exceptions.HTTPError as e:
            body = e.response.text[:200] if e.response is not None else ""
            logger.error(f"AI service HTTP error: {e} {body}")
            raise UpstreamError(f"AI service returned error: {e.response.status_code if e.response is not None else 'unknown'}")
        except requests.exceptions.RequestException as e:
            logger.error(f"AI service connection error: {e}")
            raise UpstreamError("AI service is unreachable.")

        try:
            blocks = response.json()["content"]
            text = "".join(b.get("text", "") for b in blocks if b.get("type", "text") == "text")
        except (ValueError, KeyError, TypeError, AttributeError):
            logger.error(f"Unexpected AI response shape: {response.text[:200]!r}")
            raise ParseError("Invalid response format from AI service.", raw=response.text)

        if not text.strip():
            raise ParseError("AI service returned empty content.", raw=response.text)
        return text

    @classmethod
    def call_model(
        cls,
        messages: List[Dict[str, str]],
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        domain: str = AIDomain.GENERAL
    ) -> str:
        """
        Centralized AI model caller with kill-switch, retries and fallback model.
        """
        logger.info(f"AI Coordination Request | Domain: {domain}")

        if settings.ai.kill_switch:
            logger.warning("AI Kill-switch is active. Blocking request.")
            raise AIKillSwitchError()

        if not settings.ai.anthropic_api_key:
            logger.error("Anthropic API Key missing.")
            raise UpstreamError("AI service configuration error.")

        try:
            return cls._do_call(messages, settings.ai.model_name, system, max_tokens, temperature)
        except (UpstreamError, ParseError) as e:
            logger.warning(f"Primary model {settings.ai.model_name} failed: {e.message}. Attempting fallback.")
            try:
                return cls._do_call(messages, settings.ai.fallback_model, system, max_tokens, temperature)
            except (UpstreamError, ParseError) as fe:
                logger.error(f"Fallback model {settings.ai.fallback_model} also failed: {fe.message}")
                raise UpstreamError("AI service completely unavailable.")

    @classmethod
    def generate_text(
        cls,
        user_content: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        domain: str = AIDomain.GENERAL
    ) -> str:
        """Single user turn, plain text back."""
        return cls.call_model(
            [{"role": "user", "content": user_content}],
            system=system,
            max_tokens=max_tokens,
            domain=domain
        )

    @classmethod
    def analyze_json(
        cls,
        user_content: str,
        system: Optional[str] = None,
        expect: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: float = 0.3,
        domain: str = AIDomain.GENERAL
    ) -> Any:
        """ Helper for analysis tasks that expect a JSON object or array back. """
        response_text = cls.call_model(
            [{"role": "user", "content": user_content}],
            system=system,
            max_tokens=max_tokens,
            temperature=temperature,
            domain=domain
        )
        return extract_json(response_text, expect=expect)
