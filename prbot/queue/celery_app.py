"""
Celery application configuration for prbot.

Connects to the broker and routes conflict resolution requests to a
dedicated queue.
"""

from celery import Celery
from celery.signals import worker_process_init, worker_process_shutdown

from prbot.config.settings import get_settings

settings = get_settings()

app = Celery(
    "prbot",
    broker=settings.broker_url,
    backend=settings.result_backend_url,
    include=["prbot.queue.tasks"],
)

app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    # Timezone
    timezone="UTC",
    enable_utc=True,
    # Task tracking
    task_track_started=True,
    task_acks_late=True,
    # One pull request at a time per worker process
    worker_prefetch_multiplier=1,
    # Results
    result_expires=86400,
    task_ignore_result=False,
)

app.conf.task_queues = {
    "conflicts": {
        "exchange": "prbot",
        "routing_key": "prbot.conflicts",
    },
}

app.conf.task_routes = {
    "prbot.queue.tasks.resolve_pull_request_conflicts": {"queue": "conflicts"},
}

app.conf.task_default_queue = "conflicts"
app.conf.task_default_exchange = "prbot"
app.conf.task_default_routing_key = "prbot.conflicts"


@worker_process_init.connect(weak=False)
def init_worker(*args, **kwargs):
    """Configure logging and OpenTelemetry when a worker process starts."""
    from opentelemetry.instrumentation.celery import CeleryInstrumentor

    from prbot.telemetry.config import configure_logging, configure_telemetry, is_telemetry_configured

    configure_logging()
    configure_telemetry(
        service_name=f"{settings.otel_service_name}-worker",
        additional_attributes={"prbot.component": "celery-worker"},
    )

    if is_telemetry_configured():
        CeleryInstrumentor().instrument()


@worker_process_shutdown.connect(weak=False)
def shutdown_worker(*args, **kwargs):
    """Flush telemetry when a worker process stops."""
    from prbot.telemetry.config import shutdown_telemetry

    shutdown_telemetry()


if __name__ == "__main__":
    app.start()
