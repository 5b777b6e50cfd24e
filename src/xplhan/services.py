"""
The services are the logical devices this gateway exposes on the bus. Each service is bound to a
HAN device address, the command used to talk to it, and the units its values are reported in.
"""
import logging
import zlib

from xplhan.protocol.han import Commands
from xplhan.support.mixins import CommonEqualityMixin, StringerMixin

logger = logging.getLogger(__name__)

SENSOR_CLASS = 'sensor'
MAX_ADDRESS = 254


class ConfigurationError(Exception):
    """ The configured services cannot be used. This is fatal - the gateway must not start. """


class Units:
    """ the engineering units a service reports its value in """
    none = 0
    fahrenheit = 1
    celsius = 2
    volts = 3
    amps = 4
    hertz = 5
    output = 6

    keywords = {
        'fahrenheit': fahrenheit,
        'celsius': celsius,
        'volts': volts,
        'amps': amps,
        'hertz': hertz,
        'output': output,
    }

    @classmethod
    def keyword(cls, units):
        for k, v in cls.keywords.items():
            if v == units:
                return k
        return None


# command keyword -> (command code, units valid for that command). The first unit is the default.
COMMAND_UNITS = {
    'gtmp': (Commands.temperature, (Units.fahrenheit, Units.celsius)),
    'gacd': (Commands.ac, (Units.volts, Units.hertz)),
    'gout': (Commands.output, (Units.output,)),
}


def valid_units(command):
    """
    :return: the units that may be used with the given command code.
    >>> valid_units(Commands.output) == (Units.output,)
    True
    >>> valid_units(Commands.no_op)
    ()
    """
    for code, units in COMMAND_UNITS.values():
        if code == command:
            return units
    return ()


def identity_hash(identity):
    """
    Hashes an instance identity for quick comparison. Equal hashes do not imply equal identities.
    >>> identity_hash('hall') == identity_hash('hall')
    True
    """
    return zlib.crc32(identity.encode('utf-8'))


class ServiceDescriptor(CommonEqualityMixin, StringerMixin):
    """
    The configured description of a service, as keywords and strings.
    """
    def __init__(self, name, instance=None, address=None, schema_class=None, schema_type=None,
                 command=None, units=None):
        self.name = name
        self.instance = instance
        self.address = address
        self.schema_class = schema_class
        self.schema_type = schema_type
        self.command = command
        self.units = units


class Service(StringerMixin):
    """
    A logical device exposed on the bus. Services are not changed once constructed.
    """
    def __init__(self, service_id, name, instance, address, command, units, schema_class, schema_type):
        self.service_id = service_id
        self.name = name
        self.instance = instance
        self.instance_hash = identity_hash(instance)
        self.address = address
        self.command = command
        self.units = units
        self.schema_class = schema_class
        self.schema_type = schema_type

    @property
    def is_sensor(self):
        return self.schema_class == SENSOR_CLASS

    def matches(self, instance_hash, instance):
        return self.instance_hash == instance_hash and self.instance == instance


class ServiceRegistry:
    """
    The ordered set of configured services.

    All descriptors are validated when the registry is built. A duplicate name or instance,
    an unknown command or units keyword, or a command used with units it cannot report,
    raises ConfigurationError.
    """

    def __init__(self, descriptors):
        self._services = []
        for descriptor in descriptors:
            self._services.append(self._build(len(self._services), descriptor))
        if not self._services:
            raise ConfigurationError("at least one service must be defined")

    def _build(self, service_id, d: ServiceDescriptor) -> Service:
        for s in self._services:
            if s.name == d.name:
                raise ConfigurationError("Service name %s is already defined" % d.name)
            if s.instance == d.instance:
                raise ConfigurationError("Instance id %s is already defined" % d.instance)

        for attr, key in (('instance', 'instance'), ('address', 'address'), ('schema_class', 'class'),
                          ('schema_type', 'type'), ('command', 'han-command')):
            if getattr(d, attr) in (None, ''):
                raise ConfigurationError("%s missing in stanza: %s" % (key, d.name))

        address = self._address(d)
        if d.command not in COMMAND_UNITS:
            raise ConfigurationError("Unrecognized han-command: %s in stanza: %s" % (d.command, d.name))
        command, allowed = COMMAND_UNITS[d.command]

        if d.units is None:
            if d.schema_class == SENSOR_CLASS:
                raise ConfigurationError("units missing in stanza: %s" % d.name)
            units = allowed[0]
        elif d.units in Units.keywords:
            units = Units.keywords[d.units]
        else:
            raise ConfigurationError("Unrecognized units: %s in stanza: %s" % (d.units, d.name))

        if units not in allowed:
            raise ConfigurationError("Instance %s fails sanity check of han command %s to units %s"
                                     % (d.instance, d.command, d.units))

        service = Service(service_id, d.name, d.instance, address, command, units, d.schema_class, d.schema_type)
        logger.debug("Service %s: instance %s, class %s, type %s, address %d"
                     % (d.name, d.instance, d.schema_class, d.schema_type, address))
        return service

    @staticmethod
    def _address(d: ServiceDescriptor):
        address = d.address
        if isinstance(address, str):
            if not address.isdigit():
                raise ConfigurationError("In stanza %s, the address must be between 0 and %d" % (d.name, MAX_ADDRESS))
            address = int(address)
        if not isinstance(address, int) or not 0 <= address <= MAX_ADDRESS:
            raise ConfigurationError("In stanza %s, the address must be between 0 and %d" % (d.name, MAX_ADDRESS))
        return address

    def find_by_identity(self, instance_hash, instance):
        """
        Finds the service with the given instance identity. The hash is compared first,
        and the identity string resolves any collision.
        :return: the service, or None
        """
        for s in self._services:
            if s.matches(instance_hash, instance):
                return s
        return None

    def find(self, instance):
        return self.find_by_identity(identity_hash(instance), instance)

    def all(self):
        return tuple(self._services)

    def __iter__(self):
        return iter(self._services)

    def __len__(self):
        return len(self._services)
