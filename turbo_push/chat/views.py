from __future__ import annotations

from http import HTTPStatus

from django.http import HttpResponse
from django.http import JsonResponse
from django.views import View

from turbo_push.chat import CHAT_GROUP
from turbo_push.chat import MESSAGE_TEMPLATE
from turbo_push.exceptions import TransportError
from turbo_push.realtime.transport import Destination
from turbo_push.streams.api import send_partial_from_request_sync
from turbo_push.streams.response import TurboStreamTemplateMixin


def send_message(request):
    """Push the message to the chat group; the sender gets an empty 204."""

    text = request.GET.get("model", "")
    try:
        send_partial_from_request_sync(
            request,
            Destination.group(CHAT_GROUP),
            MESSAGE_TEMPLATE,
            text,
        )
    except TransportError as exc:
        return JsonResponse(
            {"detail": str(exc)},
            status=HTTPStatus.SERVICE_UNAVAILABLE,
        )
    return HttpResponse(status=HTTPStatus.NO_CONTENT)


class MessageView(TurboStreamTemplateMixin, View):
    """Answer with the fragment itself, rendered from the URL-name default."""

    def get(self, request, *args, **kwargs):
        return self.render_turbo_stream(model=request.GET.get("model", ""))
