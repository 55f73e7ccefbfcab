# llm.py  — uses google-generativeai directly (no LangChain wrapper)
import os
from typing import Optional

from dotenv import load_dotenv
from loguru import logger
import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

load_dotenv()

# Pin a model in .env (GEMINI_MODEL=...); no fallback list, callers decide on retries.
DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_TIMEOUT_SECONDS = 60.0

PROVIDER = "gemini"


class LLMError(Exception):
    pass


class ModelUnavailable(LLMError):
    """Provider or network failure, or an unusable (blocked/empty) reply."""


class ModelTimeout(LLMError):
    """The provider did not answer within the configured deadline."""


class GeminiGateway:
    """
    Sends one prompt to Gemini and returns the raw completion text.
    No retries, no streaming.
    """

    provider = PROVIDER

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None,
                 timeout: Optional[float] = None):
        api_key = (api_key or os.getenv("GOOGLE_API_KEY", "")).strip()
        if not api_key:
            raise ModelUnavailable("GOOGLE_API_KEY is missing in .env")
        self.model_name = model_name or (os.getenv("GEMINI_MODEL") or "").strip() or DEFAULT_MODEL
        self.timeout = timeout or float(os.getenv("GEMINI_TIMEOUT_SECONDS") or DEFAULT_TIMEOUT_SECONDS)
        genai.configure(api_key=api_key)

    def complete(self, prompt: str) -> str:
        model = genai.GenerativeModel(self.model_name)
        logger.info(f"[LLM] Calling model {self.model_name} (prompt {len(prompt)} chars)")
        try:
            resp = model.generate_content(prompt, request_options={"timeout": self.timeout})
        except (google_exceptions.DeadlineExceeded, TimeoutError) as e:
            raise ModelTimeout(f"Model {self.model_name} timed out after {self.timeout}s") from e
        except (google_exceptions.GoogleAPIError, ConnectionError) as e:
            raise ModelUnavailable(f"Model {self.model_name} call failed: {e}") from e

        # .text raises ValueError when the candidate was blocked or has no parts
        try:
            text = resp.text
        except ValueError as e:
            raise ModelUnavailable(f"Model {self.model_name} returned no usable text: {e}") from e
        if not text:
            raise ModelUnavailable(f"Model {self.model_name} returned empty response.")

        logger.info(f"[LLM] Received {len(text)} chars from {self.model_name}")
        logger.debug(f"[LLM] Raw response: {text}")
        return text

    # --- Simple ping for /api/llm-test
    def ping(self) -> dict:
        """
        Returns {"ok": True, "model": <model_used>, "content": "..."} on success,
                or {"ok": False, "error": "..."} on failure.
        """
        try:
            text = self.complete("Reply with OK").strip()
        except LLMError as e:
            return {"ok": False, "model": self.model_name, "error": str(e)}
        return {"ok": True, "model": self.model_name, "content": text[:200]}
