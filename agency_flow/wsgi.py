"""
WSGI config for agency_flow project.
"""

import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'agency_flow.settings')
application = get_wsgi_application()
