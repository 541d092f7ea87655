from __future__ import annotations

import asyncio
import base64
from typing import Optional

from .form_state import ProfileImage


def to_data_url(data: bytes, content_type: str) -> str:
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{payload}"


async def encode_profile(profile: Optional[ProfileImage]) -> Optional[str]:
    """Read the image off the event loop and embed it as a data URL.

    Raises ``EncodingFailure`` when the bytes cannot be read.
    """
    if profile is None:
        return None
    data = await asyncio.to_thread(profile.read)
    return to_data_url(data, profile.content_type)
