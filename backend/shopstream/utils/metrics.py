# /shopstream/utils/metrics.py

from prometheus_client import Counter, Histogram, Gauge

# All Prometheus metrics used for application monitoring live here.

# Catalog
catalog_requests_counter = Counter('catalog_requests_total', 'Catalog lookups by source', ['source', 'status'])
bulk_pages_counter = Counter('catalog_bulk_pages_total', 'Storefront pages fetched by the bulk loader', ['status'])
inventory_rebuilds_counter = Counter('inventory_rebuilds_total', 'Inventory index rebuilds', ['status'])
inventory_size_gauge = Gauge('inventory_products', 'Products currently held by the inventory index')

# AI
ai_requests_counter = Counter('ai_requests_total', 'Total AI requests', ['model', 'status'])

# Performance
response_time_histogram = Histogram('response_time_seconds', 'Response time in seconds', ['endpoint'])
