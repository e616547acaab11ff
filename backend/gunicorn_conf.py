# backend/gunicorn_conf.py

# Gunicorn config for serving shopstream.main:app
#   gunicorn -c backend/gunicorn_conf.py shopstream.main:app

import os

bind = os.getenv("BIND", "0.0.0.0:8000")
# Each worker holds its own inventory index and carts.
workers = int(os.getenv("WORKERS", "2"))
worker_class = "uvicorn.workers.UvicornWorker"
# Bulk inventory refreshes can take a while.
timeout = 180

forwarded_allow_ips = "*"

accesslog = "-"
errorlog = "-"
loglevel = "info"
