from django.conf import settings
from django.contrib.staticfiles.urls import staticfiles_urlpatterns
from django.urls import include
from django.urls import path

urlpatterns = [
    path("chat/", include("turbo_push.chat.urls", namespace="chat")),
]
if settings.DEBUG:
    # Serves static/turbo_push/stream_observer.js under runserver/uvicorn
    urlpatterns += staticfiles_urlpatterns()
