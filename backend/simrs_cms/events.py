"""
Real-time event publishing.

Services never talk to Socket.IO directly; they receive an ``EventPublisher``
(or fall back to the one named by ``settings.SIMRS_EVENT_PUBLISHER``) and call
``emit(event, payload)``. Delivery is best-effort: a failed emit is logged and
never breaks the request that triggered it.
"""
import json
import logging

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


def to_wire(payload):
    """Coerce UUIDs, Decimals and datetimes into JSON-safe primitives."""
    return json.loads(json.dumps(payload, cls=DjangoJSONEncoder))


class EventPublisher:
    def emit(self, event, payload, room=None):
        raise NotImplementedError


class SocketIOPublisher(EventPublisher):
    def emit(self, event, payload, room=None):
        try:
            from asgiref.sync import async_to_sync
            from simrs_cms.sio import sio

            async_to_sync(sio.emit)(event, to_wire(payload), room=room)
        except Exception:
            logger.exception("Socket emit error (event=%s)", event)


class NullPublisher(EventPublisher):
    def emit(self, event, payload, room=None):
        logger.debug("Dropping event %s", event)


class RecordingPublisher(EventPublisher):
    """Keeps emitted events in memory. Used by the test-suite."""

    def __init__(self):
        self.events = []

    def emit(self, event, payload, room=None):
        self.events.append((event, payload))

    def names(self):
        return [name for name, _ in self.events]

    def payloads(self, event):
        return [payload for name, payload in self.events if name == event]


def get_publisher():
    return import_string(settings.SIMRS_EVENT_PUBLISHER)()
