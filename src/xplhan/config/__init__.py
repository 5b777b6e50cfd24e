"""
Loads the gateway configuration file, built on ConfigObj, with a schema to validate the
types of the config data and fill in defaults.
"""
