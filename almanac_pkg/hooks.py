"""
Named extension points. Callbacks run in registration order and receive
(event, item); an event with nothing registered is a no-op.
"""

BEFORE_WRITE = 'before_write'
AFTER_WRITE = 'after_write'

EVENTS = (BEFORE_WRITE, AFTER_WRITE)


class HookRegistry:
    def __init__(self):
        self._callbacks = {}

    def register(self, event, callback):
        if event not in EVENTS:
            raise ValueError(f"Unknown hook event: {event}")
        self._callbacks.setdefault(event, []).append(callback)

    def callbacks(self, event):
        return list(self._callbacks.get(event, []))

    def call(self, event, item):
        for callback in self._callbacks.get(event, []):
            callback(event, item)

    def __contains__(self, event):
        return bool(self._callbacks.get(event))
