"""
Websocket access to the notification feed.
"""
import json

import pytest
from asgiref.sync import async_to_sync
from channels.testing import WebsocketCommunicator

from clinic.models import User
from clinic.realtime.consumers import NotificationConsumer

# channels closes stale DB connections around consumer events
pytestmark = pytest.mark.django_db


async def _connect(role):
    communicator = WebsocketCommunicator(NotificationConsumer.as_asgi(), "/ws/notifications/")
    communicator.scope["user"] = User(username=f"{role}-ws", role=role)
    connected, _ = await communicator.connect()
    greeting = json.loads(await communicator.receive_from()) if connected else None
    await communicator.disconnect()
    return connected, greeting


def test_staff_receive_the_feed():
    connected, greeting = async_to_sync(_connect)("receptionist")
    assert connected
    assert greeting == {"type": "welcome", "message": "connected"}


def test_patients_are_refused():
    connected, greeting = async_to_sync(_connect)("patient")
    assert not connected
    assert greeting is None
