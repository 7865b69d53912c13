"""Dashboard API routes — thin HTTP layer over MessageGateway."""

import sys
from contextlib import contextmanager
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from src.adapters.web.auth import require_staff
from src.domain.errors import DashboardError
from src.domain.gateway import MessageGateway
from src.domain.models import records_to_json

api_router = APIRouter(prefix="/api", tags=["dashboard"])


def _log(msg: str):
    print(msg, file=sys.stderr)


def get_gateway(request: Request) -> MessageGateway:
    return request.app.state.gateway


@contextmanager
def _failing_as(message: str):
    """Surface unexpected errors as a 500 with a fixed message."""
    try:
        yield
    except DashboardError:
        raise
    except Exception as e:
        _log(f"{message}: {e!r}")
        raise DashboardError(message) from e


# Request/Response models
class SendMessageRequest(BaseModel):
    channelId: Optional[str] = None
    content: Optional[str] = None
    useEmbed: bool = False
    title: Optional[str] = None
    color: Optional[str] = None


class EditMessageRequest(BaseModel):
    content: Optional[str] = None
    title: Optional[str] = None
    color: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    botReady: bool
    botTag: str


@api_router.get("/health", response_model=HealthResponse)
async def health(gateway: MessageGateway = Depends(get_gateway)):
    status = gateway.health()
    return HealthResponse(
        status="ok",
        botReady=status.ready,
        botTag=status.identity if status.ready and status.identity else "Not logged in",
    )


@api_router.get("/channels", dependencies=[Depends(require_staff)])
async def channels(gateway: MessageGateway = Depends(get_gateway)):
    with _failing_as("Failed to fetch channels"):
        guilds = gateway.list_channels()
    return [g.to_dict() for g in guilds]


@api_router.post("/send-message", dependencies=[Depends(require_staff)])
async def send_message(req: SendMessageRequest, gateway: MessageGateway = Depends(get_gateway)):
    with _failing_as("Failed to send message"):
        record = await gateway.send(
            req.channelId,
            req.content,
            use_embed=req.useEmbed,
            title=req.title,
            color=req.color,
        )
    return {"success": True, "messageId": record.id, "messageData": record.to_dict()}


@api_router.get("/messages", dependencies=[Depends(require_staff)])
async def messages(gateway: MessageGateway = Depends(get_gateway)):
    with _failing_as("Failed to fetch messages"):
        records = gateway.list_messages()
    return records_to_json(records)


@api_router.put("/edit-message/{message_id}", dependencies=[Depends(require_staff)])
async def edit_message(
    message_id: str,
    req: EditMessageRequest,
    gateway: MessageGateway = Depends(get_gateway),
):
    with _failing_as("Failed to edit message"):
        record = await gateway.edit(message_id, req.content, title=req.title, color=req.color)
    return {"success": True, "messageData": record.to_dict()}


@api_router.delete("/delete-message/{message_id}", dependencies=[Depends(require_staff)])
async def delete_message(message_id: str, gateway: MessageGateway = Depends(get_gateway)):
    with _failing_as("Failed to delete message"):
        await gateway.delete(message_id)
    return {"success": True}
