import logging

# Context keys passed through `extra=` by the handler, gate and adapters.
CONTEXT_KEYS = ("message_id", "correspondent_id", "step", "slot", "event_id", "reason", "error")


class ContextFormatter(logging.Formatter):
    """Appends known `extra=` context keys as `key=value` pairs after the message."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = [
            f"{key}={getattr(record, key)}"
            for key in CONTEXT_KEYS
            if getattr(record, key, None) not in (None, "")
        ]
        return f"{base} | {' '.join(context)}" if context else base


def configure_logging(level: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)
