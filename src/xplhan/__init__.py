"""
A gateway between an xPL-style message bus and a HAN device controller.

- Service: a logical device on the bus, bound to a controller address, a HAN command and units.
- Request builders turn bus command messages addressed to a service into HAN command lines.
- Work queue: commands waiting to be sent. One command is sent per tick, and only the last
  command sent awaits a response.
- Response decoders turn controller responses into the named values of a sensor.basic status message.
- Gateway: ties these together and runs on the bus loop. The bus itself is provided by the host
  application through the Bus contract.
"""
