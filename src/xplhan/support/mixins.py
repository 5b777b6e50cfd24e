"""
Mixins for the small value objects passed between the gateway components:
frames, messages, events and settings.
"""


def quote(val):
    return "'" + str(val) + "'" if val is not None else "None"


class StringerMixin:
    """ describes the object by its class name and fields, for logging and test diagnostics. """

    def __str__(self):
        return type(self).__name__ + ':{' + ", ".join(
            "'%s': %s" % (key, quote(val)) for key, val in sorted(self.__dict__.items())) + '}'

    __repr__ = __str__


class CommonEqualityMixin:
    """ a field by field equals comparison for value objects of the same class. """

    def __eq__(self, other):
        return isinstance(other, self.__class__) and self.__dict__ == other.__dict__

    def __ne__(self, other):
        return not self.__eq__(other)
