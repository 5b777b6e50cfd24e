"""
Observer support used by connectors to report connection changes.
"""


class EventSource:
    """
    Notifies each registered handler of an event, in the order the handlers were added.
    Handlers run on the thread that fires the event. A handler may add or remove handlers
    while an event is fired; the change applies from the next event.
    """

    def __init__(self):
        self._handlers = []

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def __len__(self):
        return len(self._handlers)

    def add(self, handler):
        self._handlers.append(handler)
        return self

    def remove(self, handler):
        """ removes the handler. Removing a handler that was not added does nothing. """
        if handler in self._handlers:
            self._handlers.remove(handler)
        return self

    def fire(self, event):
        for handler in tuple(self._handlers):
            handler(event)
