from collections import deque

from xplhan.support.mixins import StringerMixin


class WorkItem(StringerMixin):
    """
    A command line waiting to be sent to the controller.
    :param service: The service expecting the response, or None when no response is expected.
    :param line: The encoded command, without line terminator.
    """
    def __init__(self, service, line):
        self.service = service
        self.line = line


class WorkQueue:
    """
    Commands waiting to be sent, in the order they were accepted.
    """

    def __init__(self):
        self._items = deque()

    def enqueue(self, service, line) -> WorkItem:
        item = WorkItem(service, line)
        self._items.append(item)
        return item

    def peek(self):
        """ :return: the oldest item, or None when the queue is empty """
        return self._items[0] if self._items else None

    def pop(self):
        """ removes and returns the oldest item, or None when the queue is empty """
        return self._items.popleft() if self._items else None

    def clear(self):
        self._items.clear()

    def __len__(self):
        return len(self._items)

    def __bool__(self):
        return bool(self._items)

    def __iter__(self):
        return iter(tuple(self._items))
