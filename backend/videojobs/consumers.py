import json

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from .jobs import get_job


class VideoJobConsumer(AsyncWebsocketConsumer):
    """Streams status changes of one video job to the compose view."""

    async def connect(self):
        self.job_id = self.scope['url_route']['kwargs']['job_id']
        job = await database_sync_to_async(get_job)(self.job_id)
        if job is None:
            await self.close(code=4404)
            return

        self.group_name = f'video_job_{job.pk}'
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

        # Late subscribers get the current state first
        await self.send(text_data=json.dumps({
            "job_id": str(job.pk),
            "status": job.status,
            "outcome": job.outcome,
            "error": job.error_message or None,
        }))

    async def disconnect(self, close_code):
        if hasattr(self, 'group_name'):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def job_update(self, event):
        await self.send(text_data=json.dumps(event['data']))
