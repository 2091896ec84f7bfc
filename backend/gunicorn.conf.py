import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
# The sync-in-progress flag lives in process memory; one process, many threads.
workers = 1
accesslog = "-"
errorlog = "-"
worker_class = "gthread"
threads = int(os.environ.get("GUNICORN_THREADS", 4))
# Must exceed PAGOS_REMOTE_TIMEOUT so a slow sync fails in the gateway, not the worker.
timeout = int(os.environ.get("GUNICORN_TIMEOUT", 60))
