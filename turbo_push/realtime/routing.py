from django.urls import path

from . import consumers

websocket_urlpatterns = [
    path(
        "ws/turbo-stream/raw/<str:group>/",
        consumers.TurboStreamConsumer.as_asgi(),
    ),
]
