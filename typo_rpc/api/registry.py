"""Services by name, for delegated and layered dispatching.

Build one at startup and pass it to the Dispatcher.
"""

from collections import OrderedDict

from typo_rpc.api.invocation import Service

__all__ = ('ServiceRegistry', )


class ServiceRegistry(object):
    """Maps service names like 'metaWeblog' to services.

    Register either a Service instance, shared by all requests, or a
    zero-argument factory called once per lookup.
    """
    def __init__(self):
        self._services = OrderedDict()

    def register(self, name, service):
        if name in self._services:
            raise ValueError('Service %r is already registered' % name)

        self._services[name] = service

    def lookup(self, name):
        """The service registered as name, or None."""
        service = self._services.get(name)
        if service is None or isinstance(service, Service):
            return service

        return service()

    def names(self):
        return list(self._services)

    def __contains__(self, name):
        return name in self._services
