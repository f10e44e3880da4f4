from typing import Iterable

from quizboard import socketio

NAMESPACE = '/ws'


def dispatch(outbound: Iterable) -> None:
    """Emit engine Outbound messages to their room or connection."""
    # socketio.emit works from handlers and background tasks alike
    for message in outbound:
        socketio.emit(message.event, message.payload, to=message.to, namespace=NAMESPACE)
