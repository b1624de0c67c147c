"""
Gunicorn configuration for StyleRewards.

    gunicorn -c gunicorn.conf.py run:app
"""
import os

bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"

# Sync workers: each request is one short, blocking ledger operation
workers = int(os.getenv('GUNICORN_WORKERS', '2'))
worker_class = 'sync'
timeout = 60
keepalive = 5

# Logging
accesslog = '-'  # stdout
errorlog = '-'   # stderr
loglevel = os.getenv('LOG_LEVEL', 'info')
capture_output = True

proc_name = 'stylerewards'

preload_app = True

graceful_timeout = 30


def on_starting(server):
    server.log.info("Starting StyleRewards server")


def on_exit(server):
    server.log.info("StyleRewards server shutting down")
