# backend/wsgi.py
from threadlog import create_app

app = create_app()
