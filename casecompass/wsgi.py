"""
WSGI config for casecompass project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'casecompass.settings')

application = get_wsgi_application()
