"""XML-RPC wire format: decode method calls, encode responses and faults,
   including the system.multicall batch convention.
"""

import copy
import xml.parsers.expat
import xmlrpc.client

from typo_rpc.api import WebServiceError
from typo_rpc.api.signatures import to_wire

__all__ = (
    'Request', 'XmlRpcProtocol', 'ProtocolError', 'MulticallFault',
    'ResolutionFault', 'ExecutionFault')


class ProtocolError(WebServiceError):
    """The request body isn't a valid XML-RPC method call."""


class Request(object):
    """A decoded method call."""
    def __init__(self, protocol, method_name, method_params,
                 service_name=None, protocol_options=None):
        self.protocol = protocol
        self.method_name = method_name
        self.method_params = method_params
        self.service_name = service_name
        self.protocol_options = protocol_options or {}

    def copy(self, **changes):
        request = copy.copy(self)
        for name, value in changes.items():
            setattr(request, name, value)

        return request

    def __repr__(self):
        return 'Request(%r, service_name=%r)' % (
            self.method_name, self.service_name)


class MulticallFault(object):
    """A failed call within system.multicall, in place of its result."""
    code = None
    message_key = None

    def __init__(self, message):
        self.message = message

    def to_wire(self):
        return {'faultCode': self.code, self.message_key: self.message}

    def __eq__(self, other):
        return type(self) is type(other) and self.message == other.message

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def __repr__(self):
        return '%s(%r)' % (type(self).__name__, self.message)


class ResolutionFault(MulticallFault):
    """The call couldn't be routed to a method."""
    code = 4
    message_key = 'faultMessage'


class ExecutionFault(MulticallFault):
    """The method raised."""
    code = 3
    message_key = 'faultString'


class XmlRpcProtocol(object):
    def __init__(self, encoding='utf-8'):
        self.encoding = encoding
        self.apis = []

    def decode_request(self, body, service_name=None):
        try:
            # Wire times and binaries stay DateTime and Binary; casting to the
            # declared types unwraps them, with or without a trailing Z.
            params, method_name = xmlrpc.client.loads(
                body, use_builtin_types=False)
        except (xml.parsers.expat.ExpatError, ValueError, TypeError) as e:
            raise ProtocolError('Malformed XML-RPC request: %s' % e)

        if not method_name:
            raise ProtocolError('Malformed XML-RPC request: no methodName')

        return Request(
            self, method_name, list(params), service_name,
            {'encoding': self.encoding})

    def register_api(self, api):
        if api not in self.apis:
            self.apis.append(api)

    def _dumps(self, params, options):
        encoding = (options or {}).get('encoding', self.encoding)
        return xmlrpc.client.dumps(
            params, methodresponse=True, allow_none=True,
            encoding=encoding).encode(encoding)

    def encode_response(self, response_name, value, entry, options=None):
        # XML-RPC responses are anonymous, response_name isn't sent.
        return self._dumps((to_wire(value, entry), ), options)

    def encode_fault(self, code, message, options=None):
        encoding = (options or {}).get('encoding', self.encoding)
        return xmlrpc.client.dumps(
            xmlrpc.client.Fault(code, message), methodresponse=True,
            allow_none=True, encoding=encoding).encode(encoding)

    def check_marshallable(self, value, entry=None):
        """Raise if value can't be encoded, e.g. an int beyond 32 bits."""
        xmlrpc.client.Marshaller(allow_none=True).dumps(
            (to_wire(value, entry), ))

    def encode_multicall_response(self, responses, options=None):
        """Encode (value, entry) pairs as one system.multicall response.

        Each successful result is wrapped in a one-element array; faults are
        sent as structs.
        """
        results = []
        for value, entry in responses:
            if isinstance(value, MulticallFault):
                results.append(value.to_wire())
            else:
                results.append([to_wire(value, entry)])

        return self._dumps((results, ), options)
