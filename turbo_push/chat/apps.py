from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class ChatConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "turbo_push.chat"
    verbose_name = _("Chat")

    def ready(self):
        import turbo_push.chat.events  # noqa: F401, PLC0415
