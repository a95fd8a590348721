# =============================================================================
# PropDesk Backend - gunicorn settings
# =============================================================================

import os

# =============================================================================
# SOCKET AND WORKERS
# =============================================================================

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
wsgi_app = "propdesk_backend.wsgi:application"
chdir = os.getenv("GUNICORN_CHDIR", os.path.dirname(os.path.abspath(__file__)))

# Notification fan-out lives in process memory: every stream subscriber
# and every publisher must share one process, so scale with threads.
workers = int(os.getenv("GUNICORN_WORKERS", 1))
worker_class = os.getenv("GUNICORN_WORKER_CLASS", "gthread")

# Each open notification stream holds one thread
threads = int(os.getenv("GUNICORN_THREADS", 32))

# Streams send a heartbeat well within this
timeout = 120
graceful_timeout = 30
keepalive = 5

# Recycling the only worker drops every open stream; clients reconnect
max_requests = int(os.getenv("GUNICORN_MAX_REQUESTS", 0))

# =============================================================================
# REQUEST LIMITS
# =============================================================================

limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190

# =============================================================================
# LOGGING (stdout/stderr, collected by the container runtime)
# =============================================================================

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(D)sus user=%(u)s'
enable_stdio_inheritance = True

daemon = False
pidfile = None
proc_name = "propdesk"


def post_worker_init(worker):
    worker.log.info(f"PropDesk worker {worker.pid} ready ({threads} threads)")


def worker_abort(worker):
    worker.log.warning(f"PropDesk worker {worker.pid} aborted; open notification streams dropped")
