import base64
import logging
from typing import Optional

import anthropic

from ..core.config import settings
from ..core.errors import MalformedResponse, ServiceError, ServiceUnavailable

logger = logging.getLogger(__name__)


class AnalysisClient:
    """Sends one image and prompt pair to Claude and returns the text.

    SDK retries are disabled: a failed call aborts the upload and the user
    resubmits.
    """

    def __init__(self, client: Optional[anthropic.Anthropic] = None) -> None:
        self._client = client or anthropic.Anthropic(
            api_key=settings.anthropic_api_key,
            timeout=settings.analysis_timeout,
            max_retries=0,
        )

    def analyze(
        self,
        image_bytes: bytes,
        system_prompt: str,
        user_prompt: str,
        media_type: str = "image/jpeg",
    ) -> str:
        data = base64.standard_b64encode(image_bytes).decode("utf-8")
        try:
            resp = self._client.messages.create(
                model=settings.anthropic_model,
                max_tokens=settings.analysis_max_tokens,
                system=system_prompt,
                messages=[{
                    "role": "user",
                    "content": [
                        {"type": "text", "text": user_prompt},
                        {
                            "type": "image",
                            "source": {"type": "base64", "media_type": media_type, "data": data},
                        },
                    ],
                }],
            )
        # APITimeoutError subclasses APIConnectionError
        except anthropic.APIConnectionError as e:
            logger.error("Anthropic unreachable: %s", e)
            raise ServiceUnavailable(str(e)) from e
        except anthropic.APIStatusError as e:
            logger.error("Anthropic returned %s: %s", e.status_code, e)
            raise ServiceError(f"status {e.status_code}") from e

        blocks = getattr(resp, "content", None) or []
        text = "".join(
            getattr(part, "text", "") for part in blocks if getattr(part, "type", "") == "text"
        ).strip()
        if not text:
            raise MalformedResponse("no text content in response")
        return text
