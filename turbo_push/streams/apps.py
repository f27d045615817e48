from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class StreamsConfig(AppConfig):
    name = "turbo_push.streams"
    label = "turbo_streams"
    verbose_name = _("Turbo Streams")

    def ready(self):
        from turbo_push.realtime.transport import transport_from_settings  # noqa: PLC0415

        from . import registry  # noqa: PLC0415
        from .dispatch import FragmentDispatcher  # noqa: PLC0415
        from .dispatch import RenderingDependencies  # noqa: PLC0415

        registry.configure(
            FragmentDispatcher(
                RenderingDependencies.from_settings(),
                transport_from_settings(),
            )
        )
