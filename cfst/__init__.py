"""CloudflareSpeedTest: find the lowest-latency, fastest CDN addresses."""

__version__ = "2.0.0"
