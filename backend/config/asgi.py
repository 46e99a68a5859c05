"""
ASGI config for the video pipeline project.

It exposes the ASGI callable as a module-level variable named ``application``.

For more information on this file, see
https://docs.djangoproject.com/en/5.2/howto/deployment/asgi/
"""

import os
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

# Django must be set up before the routing module imports consumers
django_asgi_app = get_asgi_application()

from channels.routing import ProtocolTypeRouter, URLRouter  # noqa: E402
from channels.auth import AuthMiddlewareStack  # noqa: E402
import videojobs.routing  # noqa: E402

application = ProtocolTypeRouter({
    # Standard HTTP requests go here
    "http": django_asgi_app,

    # Job status updates for the studio UI
    "websocket": AuthMiddlewareStack(
        URLRouter(
            videojobs.routing.websocket_urlpatterns
        )
    ),
})
