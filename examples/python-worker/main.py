"""Example worker pushing its metrics to Graphite.

Run a collector stand-in with GNU netcat and point the worker at it:

    $ nc -v -l -p 2003
    $ GRAPHITE_PREFIX=example GRAPHITE_HOST=localhost GRAPHITE_PORT=2003 \
      GRAPHITE_PUSH_INTERVAL=5000 python main.py
"""

import random
import signal
import sys
import time

from prometheus_client import Counter, Gauge, Histogram

from app.observability import get_logger, initialize_observability, is_metrics_initialized
from graphite_metrics import Registry, stop_metrics_pusher

SERVICE_NAME = "example-worker-python"

jobs_total = Counter("jobs", "Jobs processed", ["queue"], registry=Registry)
queue_depth = Gauge("queue_depth", "Jobs waiting", registry=Registry)
job_duration_seconds = Histogram("job_duration_seconds", "Job duration in seconds", registry=Registry)


def main():
    initialize_observability(SERVICE_NAME)
    logger = get_logger()
    logger.info("worker starting", metrics=is_metrics_initialized())

    def shutdown(sig, frame):
        logger.info("worker shutting down")
        stop_metrics_pusher()
        sys.exit(0)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    while True:
        queue_depth.set(random.randint(0, 50))
        with job_duration_seconds.time():
            time.sleep(random.uniform(0.05, 0.5))
        jobs_total.labels(queue=random.choice(["default", "priority"])).inc()


if __name__ == "__main__":
    main()
