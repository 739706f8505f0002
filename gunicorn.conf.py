"""Gunicorn configuration file."""

import os

# Server socket
bind = os.getenv("GUNICORN_BIND", "127.0.0.1:8000")

# One worker process: the store's lock and the backup queue live in-process.
# Concurrency comes from threads.
workers = 1
worker_class = "gthread"
threads = int(os.getenv("GUNICORN_THREADS", "4"))

# A restore waits for BACKUP_TIMEOUT; leave headroom above it
timeout = int(os.getenv("GUNICORN_TIMEOUT", "180"))
graceful_timeout = int(os.getenv("GUNICORN_GRACEFUL_TIMEOUT", "30"))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", "5"))

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")

wsgi_app = "application:app"
