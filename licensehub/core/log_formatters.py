"""Logging formatters shared by the project's LOGGING configuration"""
import json
import logging


class JsonLineFormatter(logging.Formatter):
    """
    Render a record as a single JSON object on one line.

    Structured fields are passed through ``extra={'audit': {...}}`` and merged
    into the top-level object next to ``level``, ``message`` and ``service``.
    """

    def __init__(self, service=None, **kwargs):
        super().__init__(**kwargs)
        self.service = service

    def format(self, record):
        payload = {
            'level': record.levelname.lower(),
            'message': record.getMessage(),
        }
        if self.service:
            payload['service'] = self.service
        payload.update(getattr(record, 'audit', None) or {})
        return json.dumps(payload, default=str)
