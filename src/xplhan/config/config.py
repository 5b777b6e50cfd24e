import logging
import os

from configobj import ConfigObj, ConfigObjError, Section, flatten_errors
from validate import Validator

from xplhan.services import ConfigurationError, ServiceDescriptor
from xplhan.support.mixins import CommonEqualityMixin, StringerMixin

logger = logging.getLogger(__name__)

# The default extension for configuration files
config_extension = '.cfg'

GENERAL_SECTION = 'general'
# the schema section applied to each listed service
SERVICE_SCHEMA = 'service'


def config_filename(name, directory=None):
    """
    Determines the location of a config file. By default, the file is located beside this module.
    """
    directory = directory or os.path.dirname(os.path.abspath(__file__))
    return os.path.join(directory, name + config_extension)


SCHEMA_FILE = config_filename('xplhan.schema')


def load_config_file_base(file, must_exist=True):
    """
    Loads a configuration file
    :param file:        The configuration file to load
    :param must_exist:  when True, the file must exist or an exception is thrown.
    :return: The ConfigObj instance for the file.
    """
    try:
        return ConfigObj(file, interpolation='Template', file_error=must_exist) \
            if must_exist or os.path.exists(file) else ConfigObj()
    except ConfigObjError as e:
        raise type(e)(str(e) + ' at ' + file)


def listed_services(config):
    """
    The service names listed in the general section, as written in the file.
    """
    general = config.get(GENERAL_SECTION)
    services = general.get('services') if isinstance(general, Section) else None
    if services is None:
        return []
    return [services] if isinstance(services, str) else list(services)


def gateway_configspec(config, schema=SCHEMA_FILE) -> ConfigObj:
    """
    Builds the configspec for a configuration: the general section, plus the service schema
    for each listed service that has a section. Sections that are not listed are not validated.
    """
    template = ConfigObj(schema, _inspec=True, file_error=True, raise_errors=True)
    configspec = ConfigObj(_inspec=True)
    configspec[GENERAL_SECTION] = template[GENERAL_SECTION].dict()
    for name in listed_services(config):
        if name != GENERAL_SECTION and name in config.sections:
            configspec[name] = template[SERVICE_SCHEMA].dict()
    return configspec


def validation_errors(config, result):
    """
    Describes each key or section that failed validation.
    :return: a list of strings
    """
    errors = []
    for section_list, key, error in flatten_errors(config, result):
        section = '/'.join(section_list) or 'top level'
        if key is None:
            errors.append("section [%s] is missing" % section)
        elif error is False:
            errors.append("%s is missing in [%s]" % (key, section))
        else:
            errors.append("%s in [%s]: %s" % (key, section, error))
    return errors


def load_config(file, schema=SCHEMA_FILE):
    """
    Loads a configuration file and validates it against the schema.
    Defaults from the schema are filled in for keys that are not given.
    :raises ConfigObjError: if the file cannot be parsed or fails validation.
    """
    config = load_config_file_base(file)
    config.configspec = gateway_configspec(config, schema)
    result = config.validate(Validator(), preserve_errors=True)
    if result is not True:
        raise ConfigObjError("the config file %s failed validation: %s"
                             % (file, '; '.join(validation_errors(config, result))))
    return config


class GatewaySettings(CommonEqualityMixin, StringerMixin):
    """
    The general settings of the gateway.
    :param host: the host name or address of the HAN controller.
    :param port: the TCP port of the HAN controller.
    :param tick_interval: seconds between sending queued commands.
    :param log_level: the name of the logging level for the host application to apply.
    :param services: the names of the service sections, in order.
    The remaining settings are passed through for the host application.
    """
    def __init__(self, host='localhost', port=1129, tick_interval=1.0, log_level='WARNING', services=(),
                 log_path=None, instance_id=None, interface=None, pid_file=None):
        self.host = host
        self.port = port
        self.tick_interval = tick_interval
        self.log_level = log_level
        self.services = list(services)
        self.log_path = log_path
        self.instance_id = instance_id
        self.interface = interface
        self.pid_file = pid_file

    @property
    def logging_level(self):
        """
        >>> GatewaySettings(log_level='DEBUG').logging_level
        10
        """
        return logging.getLevelName(self.log_level)


def gateway_settings(general) -> GatewaySettings:
    return GatewaySettings(
        host=general['host'],
        port=general['port'],
        tick_interval=general['tick-interval'],
        log_level=general['log-level'],
        services=general['services'],
        log_path=general['log-path'],
        instance_id=general['instance-id'],
        interface=general['interface'],
        pid_file=general['pid-file'],
    )


def service_descriptor(name, section) -> ServiceDescriptor:
    return ServiceDescriptor(name, section['instance'], section['address'], section['class'],
                             section['type'], section['han-command'], section['units'])


def load_gateway_config(file):
    """
    Loads the gateway configuration.
    :return: a tuple of (GatewaySettings, list of ServiceDescriptor) with the descriptors
        in the order the services are listed.
    :raises ConfigObjError: if the file is not valid
    :raises ConfigurationError: if a listed service has no section
    """
    config = load_config(file)
    settings = gateway_settings(config[GENERAL_SECTION])
    descriptors = []
    for name in settings.services:
        if name == GENERAL_SECTION or name not in config.sections:
            raise ConfigurationError("Can't find stanza for service: %s" % name)
        descriptors.append(service_descriptor(name, config[name]))
    logger.debug("loaded %d services from %s" % (len(descriptors), file))
    return settings, descriptors
