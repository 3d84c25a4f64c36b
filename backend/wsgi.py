# backend/wsgi.py
from bitumen import create_app

app = create_app()
