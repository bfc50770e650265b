"""Route decoded XML-RPC calls to service methods and encode the results.

One request goes through:

  decode -> resolve service and API -> resolve method -> cast params
  -> before-interceptors -> method -> after-interceptors
  -> cast return value -> encode

Dispatching modes:

- 'direct': every call goes to one service object.
- 'delegated': the service is looked up by the request's service name,
  e.g. from the URL.
- 'layered': like delegated, but the service name may also come from a
  dotted method name: 'metaWeblog.getPost' calls getPost on 'metaWeblog'.

'system.multicall' runs a batch of calls; each failure in the batch becomes
a fault entry in the response instead of failing the whole batch.
"""

import inspect
import logging
import re
import xmlrpc.client

from tornado import gen

from typo_rpc.api import DispatcherError
from typo_rpc.api.protocol import (
    ExecutionFault, ProtocolError, ResolutionFault, XmlRpcProtocol)
from typo_rpc.api.signatures import infer_signature_entry

__all__ = (
    'Dispatcher', 'Invocation', 'DIRECT', 'DELEGATED', 'LAYERED',
    'DISPATCH_FAULT_CODE', 'SERVICE_FAULT_CODE')

logger = logging.getLogger('typo_rpc.api')

DIRECT = 'direct'
DELEGATED = 'delegated'
LAYERED = 'layered'
MODES = (DIRECT, DELEGATED, LAYERED)

# Fault codes for a failed single call.
DISPATCH_FAULT_CODE = 400
SERVICE_FAULT_CODE = 500

_layered_name = re.compile(r'^([^.]+)\.(.*)$')


class Invocation(object):
    """Everything needed to execute one call."""
    def __init__(self, protocol, protocol_options, service_name):
        self.protocol = protocol
        self.protocol_options = protocol_options
        self.service_name = service_name
        self.api = None
        self.api_method = None
        self.method_ordered_params = None
        self.method_named_params = None
        self.service = None

    def __repr__(self):
        return 'Invocation(%r, service_name=%r)' % (
            self.api_method, self.service_name)


def _message(exc):
    if isinstance(exc, xmlrpc.client.Fault):
        return exc.faultString

    return str(exc)


class Dispatcher(object):
    """Dispatch requests to services.

    :Parameters:
      - `registry`: a ServiceRegistry, for delegated and layered modes
      - `mode`: 'direct', 'delegated' or 'layered'
      - `service`: the service object, for direct mode
      - `exception_reporting`: if False, hide service exception messages
        from clients
    """
    def __init__(self, registry=None, mode=LAYERED, service=None,
                 exception_reporting=True):
        if mode not in MODES:
            raise ValueError('Unknown dispatching mode %r' % (mode, ))

        if mode == DIRECT and service is None:
            raise ValueError('Direct dispatching needs a service')

        if mode != DIRECT and registry is None:
            raise ValueError('%s dispatching needs a registry' % mode)

        self.registry = registry
        self.mode = mode
        self.service = service
        self.exception_reporting = exception_reporting

    @gen.coroutine
    def dispatch_body(self, body, service_name=None, protocol=None):
        """Decode an XML-RPC request body, dispatch it, return the response
        body. Never raises for a bad request, returns a fault instead.
        """
        protocol = protocol or XmlRpcProtocol()
        try:
            request = protocol.decode_request(body, service_name)
        except ProtocolError as e:
            logger.warning('%s', e)
            return protocol.encode_fault(DISPATCH_FAULT_CODE, str(e))

        response = yield self.dispatch(request)
        return response

    @gen.coroutine
    def dispatch(self, request):
        protocol = request.protocol
        options = request.protocol_options
        try:
            invocation = self.invocation_for(request)
            if isinstance(invocation, list):
                response = yield self._multicall_invoke(request, invocation)
            else:
                return_value = yield self._invoke(invocation)
                response = self._create_response(invocation, return_value)
        except xmlrpc.client.Fault as fault:
            response = protocol.encode_fault(
                fault.faultCode, fault.faultString, options)
        except DispatcherError as e:
            logger.warning('XML-RPC call "%s": %s', request.method_name, e)
            response = protocol.encode_fault(
                DISPATCH_FAULT_CODE, str(e), options)
        except Exception as e:
            logger.exception('XML-RPC call "%s"', request.method_name)
            if self.exception_reporting:
                message = str(e)
            else:
                message = 'Internal protocol error'

            response = protocol.encode_fault(
                SERVICE_FAULT_CODE, message, options)

        return response

    def invocation_for(self, request, level=0):
        """Resolve a request to an Invocation.

        For system.multicall, returns a list with an Invocation or a
        ResolutionFault per call in the batch. Raises DispatcherError if the
        request can't be resolved.
        """
        public_method_name = request.method_name
        invocation = Invocation(
            request.protocol, request.protocol_options, request.service_name)

        if self.mode == LAYERED:
            match = _layered_name.match(request.method_name)
            if match:
                invocation.service_name, public_method_name = match.groups()

        if (public_method_name == 'multicall'
                and invocation.service_name == 'system'):
            if level > 0:
                raise DispatcherError(
                    'Recursive system.multicall invocations not allowed')

            return self._multicall_invocations(request, level)

        if self.mode == DIRECT:
            invocation.service = self.service
        else:
            invocation.service = self.registry.lookup(invocation.service_name)
            if invocation.service is None:
                raise DispatcherError(
                    'no service available for service name %s' % (
                        invocation.service_name, ))

        api = invocation.api = invocation.service.web_service_api
        if api is None:
            raise DispatcherError(
                'no API attached to %s' % type(invocation.service).__name__)

        request.protocol.register_api(api)
        if api.has_public_api_method(public_method_name):
            invocation.api_method = api.public_api_method_instance(
                public_method_name)
        else:
            invocation.api_method = api.default_api_method_instance()
            if invocation.api_method is None:
                raise DispatcherError(
                    "no such method '%s' on API %s" % (
                        public_method_name, api))

        method_name = invocation.api_method.name
        if invocation.service.web_service_method(method_name) is None:
            raise DispatcherError(
                "no such method '%s' on API %s (%s)" % (
                    public_method_name, api, method_name))

        try:
            invocation.method_ordered_params = (
                invocation.api_method.cast_expects(
                    list(request.method_params)))
        except Exception:
            logger.warning(
                'Casting of method parameters failed for "%s"',
                public_method_name, exc_info=True)

            invocation.method_ordered_params = request.method_params

        invocation.method_named_params = (
            invocation.api_method.expects_to_dict(
                invocation.method_ordered_params))

        return invocation

    def _multicall_invocations(self, request, level):
        calls = list(request.method_params)
        if not calls or not isinstance(calls[0], list):
            raise DispatcherError(
                'Malformed multicall (expected array of struct elements)')

        invocations = []
        for item in calls[0]:
            if not isinstance(item, dict):
                raise DispatcherError('Multicall elements must be structs')

            if 'methodName' not in item:
                raise DispatcherError(
                    "Multicall elements must contain a 'methodName' key")

            sub_request = request.copy(
                method_name=item['methodName'],
                method_params=item.get('params', []))

            invocations.append(self._resolve(sub_request, level + 1))

        return invocations

    def _resolve(self, request, level):
        try:
            return self.invocation_for(request, level)
        except Exception as e:
            logger.warning(
                'XML-RPC multicall "%s": %s', request.method_name, e)
            return ResolutionFault(_message(e))

    def _direct_params(self, invocation):
        """Omit params for a method that takes none."""
        method = invocation.service.web_service_method(
            invocation.api_method.name)

        try:
            parameters = inspect.signature(method).parameters.values()
        except (TypeError, ValueError):
            return []

        positional = [
            p for p in parameters
            if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD,
                          p.VAR_POSITIONAL)]

        return list(invocation.method_ordered_params) if positional else []

    @gen.coroutine
    def _invoke(self, invocation):
        if self.mode == DIRECT:
            params = self._direct_params(invocation)
        else:
            params = invocation.method_ordered_params

        reasons = []
        return_value = yield invocation.service.perform_invocation(
            invocation.api_method.name, params, reasons.append)

        if reasons:
            raise DispatcherError('request canceled: %s' % reasons[0])

        return return_value

    def _cast_return(self, invocation, return_value):
        """Return value cast to its declared type, and the type."""
        api_method = invocation.api_method
        if invocation.api.has_api_method(api_method.name):
            return api_method.cast_returns(return_value), api_method.returns

        return return_value, infer_signature_entry(return_value)

    def _create_response(self, invocation, return_value):
        return_value, entry = self._cast_return(invocation, return_value)
        return invocation.protocol.encode_response(
            '%sResponse' % invocation.api_method.public_name,
            return_value, entry, invocation.protocol_options)

    @gen.coroutine
    def _multicall_invoke(self, request, invocations):
        responses = []
        for invocation in invocations:
            if isinstance(invocation, ResolutionFault):
                responses.append((invocation, None))
                continue

            try:
                return_value = yield self._invoke(invocation)
                value, entry = self._cast_return(invocation, return_value)
                request.protocol.check_marshallable(value, entry)
                responses.append((value, entry))
            except Exception as e:
                logger.exception(
                    'XML-RPC multicall "%s"', invocation.api_method.name)
                responses.append((ExecutionFault(_message(e)), None))

        return request.protocol.encode_multicall_response(
            responses, request.protocol_options)
