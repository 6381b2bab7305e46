"""Gunicorn production configuration."""
import multiprocessing

wsgi_app = "app.main:app"
chdir = "backend"
bind = "0.0.0.0:8000"
workers = multiprocessing.cpu_count() * 2 + 1
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
# Large imports run in a single request/transaction.
timeout = 180
keepalive = 5
max_requests = 1000
max_requests_jitter = 100
preload_app = True
accesslog = "-"
errorlog = "-"
loglevel = "info"
