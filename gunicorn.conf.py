"""Gunicorn configuration for the conference registration site."""

import os

bind = os.environ.get("GUNICORN_BIND", "127.0.0.1:8000")
backlog = 2048

workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
worker_class = "sync"
# Longer than the captcha / email / storage call timeouts combined
timeout = 30
keepalive = 2

max_requests = 1000
max_requests_jitter = 50

# Logging
accesslog = os.environ.get("GUNICORN_ACCESS_LOG", "-")
errorlog = os.environ.get("GUNICORN_ERROR_LOG", "-")
loglevel = os.environ.get("LOG_LEVEL", "info")
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'

proc_name = "conference_registration"

preload_app = True

# Uploads are bounded by MAX_CONTENT_LENGTH; request line/headers stay small
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190


def on_starting(server):
    server.log.info("Starting conference registration site")


def when_ready(server):
    server.log.info("Conference registration site is ready. Listening on: %s", server.address)


def on_exit(server):
    server.log.info("Shutting down conference registration site")
