"""
Wasender Schemas

PURE DATA MODELS - NO LOGIC
Wire contract of the messaging provider plus the immediate-send request.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field


PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"

MessageType = Literal["text", "image", "document", "audio", "video"]


# ============================================================================
# SEND REQUEST (INPUT)
# ============================================================================

class SendMessageRequest(BaseModel):
    """
    Immediate send request.

    Accepts snake_case and the camelCase names of the public API.
    """

    phone_number: str = Field(..., alias="phoneNumber", pattern=PHONE_PATTERN)
    message_type: MessageType = Field(..., alias="messageType")
    message: Optional[str] = Field(None, max_length=4096)
    image_url: Optional[str] = Field(None, alias="imageUrl")
    document_url: Optional[str] = Field(None, alias="documentUrl")
    audio_url: Optional[str] = Field(None, alias="audioUrl")
    video_url: Optional[str] = Field(None, alias="videoUrl")
    caption: Optional[str] = Field(None, max_length=1024)
    filename: Optional[str] = Field(None, max_length=255)
    file_name: Optional[str] = Field(None, alias="fileName", max_length=255)
    reply_to: Optional[Union[str, int]] = Field(None, alias="replyTo")

    class Config:
        populate_by_name = True


# ============================================================================
# WASENDER API PAYLOADS (OUTPUT)
# ============================================================================

class WasenderMessage(BaseModel):
    """
    Body of POST /send-message.

    Both the official (`imageUrl`, `fileName`, ...) and legacy (`image`,
    `filename`, ...) names are sent; see `build_send_payload`.
    """

    to: str
    text: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    video_url: Optional[str] = Field(None, alias="videoUrl")
    document_url: Optional[str] = Field(None, alias="documentUrl")
    audio_url: Optional[str] = Field(None, alias="audioUrl")
    image: Optional[str] = None
    video: Optional[str] = None
    document: Optional[str] = None
    audio: Optional[str] = None
    caption: Optional[str] = None
    file_name: Optional[str] = Field(None, alias="fileName")
    filename: Optional[str] = None
    reply_to: Optional[Union[str, int]] = Field(None, alias="replyTo")

    class Config:
        populate_by_name = True


# ============================================================================
# WASENDER API RESPONSES (INPUT)
# ============================================================================

class WasenderMessageData(BaseModel):
    id: Optional[Union[str, int]] = None
    status: Optional[str] = None
    timestamp: Optional[Union[str, int]] = None

    class Config:
        extra = "allow"


class WasenderResponse(BaseModel):
    """Envelope returned by send / info / session actions."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[str] = None

    class Config:
        extra = "allow"

    @property
    def message_data(self) -> Optional[WasenderMessageData]:
        if isinstance(self.data, dict):
            return WasenderMessageData(**self.data)
        return None


class WasenderSession(BaseModel):
    id: Union[str, int]
    name: Optional[str] = None
    status: Optional[str] = None  # connected, disconnected, connecting, qr_code
    qr_code: Optional[str] = None
    phone_number: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        extra = "allow"


class WasenderAccountInfo(BaseModel):
    id: Optional[Union[str, int]] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    plan: Optional[str] = None
    credits_remaining: Optional[int] = None
    created_at: Optional[str] = None

    class Config:
        extra = "allow"
