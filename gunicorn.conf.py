"""
Gunicorn configuration for EDuty production deployment.

Usage:
    gunicorn eduty.main:app -c gunicorn.conf.py
"""

import multiprocessing
import os

# Bind to all interfaces on PORT (default 3001)
bind = f"0.0.0.0:{os.getenv('PORT', '3001')}"

# Worker processes: CPU cores * 2 + 1 (Gunicorn recommendation)
workers = int(os.getenv("WEB_CONCURRENCY", multiprocessing.cpu_count() * 2 + 1))

# Use Uvicorn's ASGI worker for FastAPI
worker_class = "uvicorn.workers.UvicornWorker"

# Request timeout (seconds); identity lookups are bounded by IDENTITY_TIMEOUT
timeout = 60

# Keep-alive connections (seconds)
keepalive = 5

# Logging
accesslog = "-"  # stdout
errorlog = "-"   # stderr
loglevel = "info"
