import logging

import socketio

logger = logging.getLogger(__name__)

# cors_allowed_origins='*' so kiosk and display screens on other hosts can connect
sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins='*')


@sio.event
async def connect(sid, environ):
    logger.info("SocketIO client connected: %s", sid)


@sio.event
async def disconnect(sid):
    logger.info("SocketIO client disconnected: %s", sid)


@sio.event
async def join_room(sid, room):
    logger.info("SocketIO %s joining room: %s", sid, room)
    await sio.enter_room(sid, room)

