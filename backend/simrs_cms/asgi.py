"""
ASGI entrypoint for simrs_cms.

One process serves the REST API and the Socket.IO channel that pushes
queue calls, quota changes and prescription updates to display screens.
Run with an ASGI server, e.g. ``uvicorn simrs_cms.asgi:application``.
"""
import os

import socketio
from django.conf import settings
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'simrs_cms.settings')

django_app = get_asgi_application()

from .sio import sio  # noqa: E402

# Requests outside SOCKETIO_PATH fall through to Django
application = socketio.ASGIApp(sio, other_asgi_app=django_app, socketio_path=settings.SOCKETIO_PATH)
