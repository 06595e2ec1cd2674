import json
from urllib.parse import parse_qs

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.contrib.auth.models import AnonymousUser
from rest_framework.authtoken.models import Token

from records.permissions import is_admin


def _user_for_token(key: str):
    try:
        return Token.objects.select_related("user").get(key=key).user
    except Token.DoesNotExist:
        return AnonymousUser()


class BackupProgressConsumer(AsyncWebsocketConsumer):
    """
    推送批量备份进度。
    The socket joins ``backup.<job_id>``; ``records.services.backup``
    sends ``backup.progress`` events to that group while it renders.
    Browsers cannot set headers on a WebSocket, so the DRF token may be
    given as ``?token=<key>`` instead of a session.
    """

    async def connect(self):
        self.job_id = self.scope["url_route"]["kwargs"].get("job_id")
        user = self.scope.get("user") or AnonymousUser()
        if not user.is_authenticated:
            query = parse_qs(self.scope.get("query_string", b"").decode())
            key = (query.get("token") or [""])[0]
            if key:
                user = await sync_to_async(_user_for_token)(key)
        if not is_admin(user):
            await self.close(code=4003)
            return

        self.group_name = f"backup.{self.job_id}"
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def backup_progress(self, event):
        # event: {"type": "backup.progress", "completed": int, "total": int, "percent": int, "message": str}
        payload = {k: v for k, v in event.items() if k != "type"}
        await self.send(json.dumps({"type": "progress", **payload}))
