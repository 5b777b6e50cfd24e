"""
The connector interfaces with the controller endpoint and manages the connection cycle.
A connector can be thought of as a conduit factory.
"""
