"""
Chat route – streams the model's answer as Server-Sent Events.
The request is validated before the stream opens, so bad input still
gets a plain JSON 400.
"""

from flask import Blueprint, Response, request, stream_with_context

from app.errors import InvalidArgument
from app.services.container import get_services

chat_bp = Blueprint("chat", __name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


@chat_bp.route("/chat/stream", methods=["POST"])
def chat_stream():
    """
    Body: { "message": "...", "history": [{"role": "user", "content": "..."}] }
    Emits: start → content* → done | error
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidArgument("Request body must be a JSON object.")

    events = get_services().chat.stream(data.get("message"), data.get("history"))

    def generate():
        for event in events:
            yield event.to_sse()

    return Response(
        stream_with_context(generate()),
        mimetype="text/event-stream",
        headers=SSE_HEADERS,
    )
