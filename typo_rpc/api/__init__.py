"""Web service core: API definitions, signature casting, invocation
   interceptors and the XML-RPC dispatcher.

   See typo_rpc.api.dispatcher for the request cycle.
"""

__all__ = ('WebServiceError', 'DispatcherError', 'InvocationError')


class WebServiceError(Exception):
    """Base class for errors raised by the web service layer."""


class DispatcherError(WebServiceError):
    """A request couldn't be routed to a service method, or was canceled."""


class InvocationError(WebServiceError):
    """An interceptor was registered that we don't know how to call."""
