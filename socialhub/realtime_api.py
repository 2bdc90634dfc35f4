"""
Real-time status endpoint
Lets a client seed its presence state before live events start arriving
"""

import logging
from typing import List

from ninja import Router, Schema
from ninja.responses import codes_4xx

from socialhub.realtime import registry
from socialhub.schemas import Envelope, ErrorOut, respond
from users.auth import JWTAuth
from users.models import Follow

logger = logging.getLogger(__name__)

router = Router(tags=["Real-time"])


class RealtimeStatusData(Schema):
    connected: bool
    websocketPath: str
    onlineFollowing: List[int]


class RealtimeStatusEnvelope(Envelope):
    data: RealtimeStatusData


@router.get(
    "/status",
    response={200: RealtimeStatusEnvelope, codes_4xx: ErrorOut},
    auth=JWTAuth(),
)
def realtime_status(request):
    user = request.auth
    following_ids = Follow.objects.filter(follower=user).values_list(
        "following_id", flat=True
    )
    online = [user_id for user_id in following_ids if registry.is_online(user_id)]
    return respond(
        200,
        "Real-time status retrieved successfully",
        {
            "connected": registry.is_online(user.id),
            "websocketPath": "/ws/events/",
            "onlineFollowing": online,
        },
    )
