"""Observability: the request recorder, the log subscriber and runtime collection.

Modules
-------
subscriber      Subscriber base class (register / unregister on a Notifier)
recorder        EventRecorder -- request.completed → page_requests row
log_subscriber  LogSubscriber -- request.completed / sql.executed → structlog
runtime         RuntimeCollector, instrument_engine, measure_view
"""

from pagelog.observability.log_subscriber import LogSubscriber
from pagelog.observability.recorder import EventRecorder, ProcessActionPayload
from pagelog.observability.runtime import (
    RuntimeCollector,
    collecting,
    instrument_engine,
    measure_view,
)
from pagelog.observability.subscriber import Subscriber

__all__ = [
    "EventRecorder",
    "LogSubscriber",
    "ProcessActionPayload",
    "RuntimeCollector",
    "Subscriber",
    "collecting",
    "instrument_engine",
    "measure_view",
]
