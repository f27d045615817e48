from django.urls import path

from turbo_push.chat.views import MessageView
from turbo_push.chat.views import send_message

app_name = "chat"
urlpatterns = [
    path("send/", send_message, name="send"),
    path("message/", MessageView.as_view(), name="message"),
]
