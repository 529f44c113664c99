"""
Wasender Client

Messaging provider adapter: sends WhatsApp text/media and manages sessions.
Every remote call goes through the retry executor with the Wasender
retry predicate.
"""

import logging
from typing import Any, Dict, List, Optional

from ..base import ProviderClient
from ..errors import ValidationError
from .schemas import (
    SendMessageRequest,
    WasenderAccountInfo,
    WasenderMessage,
    WasenderResponse,
    WasenderSession,
)

logger = logging.getLogger(__name__)

# (official, legacy) wire names kept in sync on outgoing sends
_ALIAS_PAIRS = (
    ("imageUrl", "image"),
    ("videoUrl", "video"),
    ("documentUrl", "document"),
    ("audioUrl", "audio"),
    ("fileName", "filename"),
)


def build_send_payload(message: WasenderMessage) -> Dict[str, Any]:
    """
    Serialize a send payload with official and legacy field names mirrored.

    Whichever of a pair is set is copied to the other.
    """
    payload = message.model_dump(by_alias=True, exclude_none=True)

    for official, legacy in _ALIAS_PAIRS:
        if payload.get(legacy) and not payload.get(official):
            payload[official] = payload[legacy]
        elif payload.get(official) and not payload.get(legacy):
            payload[legacy] = payload[official]

    return payload


def _unwrap_list(body: Any) -> List[Dict[str, Any]]:
    if isinstance(body, dict) and isinstance(body.get("data"), list):
        return body["data"]
    if isinstance(body, list):
        return body
    return []


def _unwrap_object(body: Any) -> Dict[str, Any]:
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        return body["data"]
    return body if isinstance(body, dict) else {}


class WasenderClient(ProviderClient):
    """Client for the Wasender REST API."""

    provider_name = "Wasender"

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def _post_send_message(self, operation: str, message: WasenderMessage) -> WasenderResponse:
        body = await self._request("POST", "/send-message", json=build_send_payload(message))
        result = WasenderResponse(**body) if isinstance(body, dict) else WasenderResponse(data=body)

        data = result.message_data
        logger.info(
            f"Wasender.{operation} succeeded",
            extra={
                "operation": operation,
                "message_id": data.id if data else None,
                "status": data.status if data else None,
            },
        )
        return result

    async def send_text_message(self, phone_number: str, text: str) -> WasenderResponse:
        self._ensure_enabled()

        async def operation():
            logger.info(
                "Sending text message",
                extra={"to": phone_number, "message_length": len(text)},
            )
            return await self._post_send_message(
                "sendTextMessage", WasenderMessage(to=phone_number, text=text)
            )

        return await self.executor.execute_wasender_operation(operation, "sendTextMessage")

    async def send_image_message(
        self, phone_number: str, image_url: str, caption: Optional[str] = None
    ) -> WasenderResponse:
        self._ensure_enabled()

        async def operation():
            logger.info(
                "Sending image message",
                extra={"to": phone_number, "image_url": image_url, "has_caption": bool(caption)},
            )
            return await self._post_send_message(
                "sendImageMessage",
                WasenderMessage(to=phone_number, image_url=image_url, caption=caption),
            )

        return await self.executor.execute_wasender_operation(operation, "sendImageMessage")

    async def send_document_message(
        self,
        phone_number: str,
        document_url: str,
        filename: Optional[str] = None,
        caption: Optional[str] = None,
    ) -> WasenderResponse:
        self._ensure_enabled()

        async def operation():
            logger.info(
                "Sending document message",
                extra={
                    "to": phone_number,
                    "document_url": document_url,
                    "document_filename": filename,
                    "has_caption": bool(caption),
                },
            )
            return await self._post_send_message(
                "sendDocumentMessage",
                WasenderMessage(
                    to=phone_number,
                    document_url=document_url,
                    file_name=filename,
                    caption=caption,
                ),
            )

        return await self.executor.execute_wasender_operation(operation, "sendDocumentMessage")

    async def send_audio_message(self, phone_number: str, audio_url: str) -> WasenderResponse:
        self._ensure_enabled()

        async def operation():
            logger.info("Sending audio message", extra={"to": phone_number, "audio_url": audio_url})
            return await self._post_send_message(
                "sendAudioMessage", WasenderMessage(to=phone_number, audio_url=audio_url)
            )

        return await self.executor.execute_wasender_operation(operation, "sendAudioMessage")

    async def send_video_message(
        self, phone_number: str, video_url: str, caption: Optional[str] = None
    ) -> WasenderResponse:
        self._ensure_enabled()

        async def operation():
            logger.info(
                "Sending video message",
                extra={"to": phone_number, "video_url": video_url, "has_caption": bool(caption)},
            )
            return await self._post_send_message(
                "sendVideoMessage",
                WasenderMessage(to=phone_number, video_url=video_url, caption=caption),
            )

        return await self.executor.execute_wasender_operation(operation, "sendVideoMessage")

    async def send_message(self, request: SendMessageRequest) -> WasenderResponse:
        """
        Dispatch an immediate send on `message_type`.

        Raises:
            ValidationError: The field required by the message type is missing
            ServiceUnavailableError: Client is disabled
        """
        self._ensure_enabled()

        logger.info(
            "Processing send message request",
            extra={"phone_number": request.phone_number, "message_type": request.message_type},
        )

        phone = request.phone_number
        kind = request.message_type

        if kind == "text":
            if not request.message:
                raise ValidationError("Message text is required for text messages")
            return await self.send_text_message(phone, request.message)

        if kind == "image":
            if not request.image_url:
                raise ValidationError("Image URL is required for image messages")
            return await self.send_image_message(phone, request.image_url, request.caption)

        if kind == "document":
            if not request.document_url:
                raise ValidationError("Document URL is required for document messages")
            return await self.send_document_message(
                phone,
                request.document_url,
                request.filename or request.file_name,
                request.caption,
            )

        if kind == "audio":
            if not request.audio_url:
                raise ValidationError("Audio URL is required for audio messages")
            return await self.send_audio_message(phone, request.audio_url)

        if kind == "video":
            if not request.video_url:
                raise ValidationError("Video URL is required for video messages")
            return await self.send_video_message(phone, request.video_url, request.caption)

        raise ValidationError(f"Unsupported message type: {kind}")

    async def get_message_info(self, message_id: str) -> WasenderResponse:
        self._ensure_enabled()

        async def operation():
            logger.info("Fetching message info", extra={"message_id": message_id})
            body = await self._request("GET", f"/messages/{message_id}/info")
            return WasenderResponse(**body) if isinstance(body, dict) else WasenderResponse(data=body)

        return await self.executor.execute_wasender_operation(operation, "getMessageInfo")

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def get_sessions(self) -> List[WasenderSession]:
        self._ensure_enabled()

        async def operation():
            logger.info("Fetching WhatsApp sessions")
            body = await self._request("GET", "/whatsapp-sessions")
            sessions = [WasenderSession(**item) for item in _unwrap_list(body)]
            logger.info("Wasender.getSessions succeeded", extra={"session_count": len(sessions)})
            return sessions

        return await self.executor.execute_wasender_operation(operation, "getSessions")

    async def get_session_info(self, session_id: str) -> WasenderSession:
        self._ensure_enabled()

        async def operation():
            logger.info("Fetching session info", extra={"session_id": session_id})
            body = await self._request("GET", f"/whatsapp-sessions/{session_id}")
            return WasenderSession(**_unwrap_object(body))

        return await self.executor.execute_wasender_operation(operation, "getSessionInfo")

    async def create_session(self, session_data: Dict[str, Any]) -> WasenderSession:
        self._ensure_enabled()

        async def operation():
            logger.info("Creating new WhatsApp session", extra={"session_name": session_data.get("name")})
            body = await self._request("POST", "/whatsapp-sessions", json=session_data)
            session = WasenderSession(**_unwrap_object(body))
            logger.info(
                "Wasender.createSession succeeded",
                extra={"session_id": session.id, "status": session.status},
            )
            return session

        return await self.executor.execute_wasender_operation(operation, "createSession")

    async def update_session(self, session_id: str, session_data: Dict[str, Any]) -> WasenderSession:
        self._ensure_enabled()

        async def operation():
            logger.info(
                "Updating WhatsApp session",
                extra={"session_id": session_id, "fields": sorted(session_data)},
            )
            body = await self._request("PUT", f"/whatsapp-sessions/{session_id}", json=session_data)
            return WasenderSession(**_unwrap_object(body))

        return await self.executor.execute_wasender_operation(operation, "updateSession")

    async def connect_session(self, session_id: str) -> WasenderResponse:
        self._ensure_enabled()

        async def operation():
            logger.info("Connecting WhatsApp session", extra={"session_id": session_id})
            body = await self._request("POST", f"/whatsapp-sessions/{session_id}/connect", json={})
            return WasenderResponse(**body) if isinstance(body, dict) else WasenderResponse(data=body)

        return await self.executor.execute_wasender_operation(operation, "connectSession")

    async def disconnect_session(self, session_id: str) -> WasenderResponse:
        self._ensure_enabled()

        async def operation():
            logger.info("Disconnecting WhatsApp session", extra={"session_id": session_id})
            body = await self._request("POST", f"/whatsapp-sessions/{session_id}/disconnect", json={})
            return WasenderResponse(**body) if isinstance(body, dict) else WasenderResponse(data=body)

        return await self.executor.execute_wasender_operation(operation, "disconnectSession")

    async def check_connection_status(self) -> bool:
        """True if at least one session reports `connected`."""
        if self.disabled:
            logger.warning("check_connection_status called while client disabled")
            return False

        sessions = await self.get_sessions()
        connected = [s for s in sessions if s.status == "connected"]

        logger.info(
            "Connection status check completed",
            extra={"total_sessions": len(sessions), "connected_sessions": len(connected)},
        )
        return bool(connected)

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    async def get_account_info(self) -> WasenderAccountInfo:
        self._ensure_enabled()

        async def operation():
            logger.info("Fetching account information")
            body = await self._request("GET", "/user")
            return WasenderAccountInfo(**_unwrap_object(body))

        return await self.executor.execute_wasender_operation(operation, "getAccountInfo")

    async def validate_configuration(self) -> bool:
        """Probe the account endpoint. Never raises."""
        if self.disabled:
            logger.warning("Wasender client disabled - skipping configuration validation")
            return False

        try:
            await self.get_account_info()
        except Exception as e:
            logger.error(f"Wasender configuration is invalid: {e}", exc_info=True)
            return False

        logger.info("Wasender configuration is valid")
        return True
