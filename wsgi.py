"""WSGI entrypoint for development and production (project root).

Usage examples:
  - Development: python -m flask --app wsgi:app run --debug
  - Gunicorn:   gunicorn -c gunicorn.conf.py wsgi:app
"""
from dotenv import load_dotenv
from conference_site import create_app

# Load environment variables from .env (if present)
load_dotenv()

app = create_app()

if __name__ == '__main__':
    app.run(debug=True)
