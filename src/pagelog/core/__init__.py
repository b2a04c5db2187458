"""pagelog core -- errors, logging, settings, events and the ORM layer.

Architecture::

    errors.py          Structured error hierarchy (PagelogError, RecordWriteError)
    logging.py         structlog configuration + get_logger
    settings.py        PagelogSettings (pydantic-settings, PAGELOG_ prefix)
    events/            Event model + in-process Notifier
    orm/               SQLAlchemy 2.0 declarative base, engine, PageRequestTable
"""
