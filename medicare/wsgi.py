"""
WSGI config for the MediCare project.

Exposes the WSGI callable as a module-level variable named ``application``.
The in-memory front-office managers live per process, so run a single
worker process (threads are fine) when serving through WSGI.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'medicare.settings')

application = get_wsgi_application()
