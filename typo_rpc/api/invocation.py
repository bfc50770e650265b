"""Invocation interceptors: hooks that run before and after a service method.

A before-interceptor can cancel the call by returning False, or
[False, 'reason'] to say why:

    class CustomService(Service):
        web_service_api = CustomApi

        def add(self, a, b):
            return a + b

        def deny(self, method_name, args):
            return [False, 'permission denied']

    CustomService.before_invocation('deny', only=['add'])

An interceptor is the name of a service method, a callable taking
(service, method_name, args[, result]), or an object with an `intercept`
method taking the same arguments. Any of them may return a Future or be a
coroutine. With only=[...] the interceptor runs just for the listed methods;
otherwise except_=[...] skips the listed methods.
"""

import inspect

from tornado import gen

from typo_rpc.api import InvocationError

__all__ = (
    'Service', 'InterceptorChain', 'Registration', 'NamedHook', 'FunctionHook',
    'ObjectHook', 'Proceed', 'Cancel', 'decision', 'as_hook', 'resolve')


@gen.coroutine
def resolve(value):
    """Wait for value if it's a Future or coroutine, else return it."""
    if gen.is_future(value) or inspect.isawaitable(value):
        value = yield value

    return value


class Proceed(object):
    cancelled = False
    reason = None

    def __repr__(self):
        return 'Proceed()'


class Cancel(object):
    cancelled = True

    def __init__(self, reason=None):
        self.reason = reason

    def __repr__(self):
        return 'Cancel(%r)' % (self.reason, )


PROCEED = Proceed()


def decision(result):
    """Interpret a before-interceptor's return value.

    A two-element sequence is (effective value, reason). The call is
    canceled only if the effective value is exactly False.
    """
    reason = None
    if isinstance(result, (list, tuple)):
        if len(result) > 1 and result[1] is not None:
            reason = result[1]

        result = result[0] if result else None

    if result is False:
        return Cancel(reason)

    return PROCEED


class NamedHook(object):
    """Calls a method of the service itself."""
    def __init__(self, name):
        self.name = name

    def evaluate(self, service, *args):
        return getattr(service, self.name)(*args)

    def __repr__(self):
        return 'NamedHook(%r)' % self.name


class FunctionHook(object):
    def __init__(self, fn):
        self.fn = fn

    def evaluate(self, service, *args):
        return self.fn(service, *args)

    def __repr__(self):
        return 'FunctionHook(%r)' % (self.fn, )


class ObjectHook(object):
    """Calls `intercept` on an object or class."""
    def __init__(self, target):
        self.target = target

    def evaluate(self, service, *args):
        return self.target.intercept(service, *args)

    def __repr__(self):
        return 'ObjectHook(%r)' % (self.target, )


def as_hook(interceptor):
    if isinstance(interceptor, (NamedHook, FunctionHook, ObjectHook)):
        return interceptor

    if isinstance(interceptor, str):
        return NamedHook(interceptor)

    # Before callable(): classes with a static intercept are callable too.
    if hasattr(interceptor, 'intercept'):
        return ObjectHook(interceptor)

    if callable(interceptor):
        return FunctionHook(interceptor)

    raise InvocationError(
        'Interceptors need to be either a method name, a callable, or an'
        ' object implementing an intercept method, not %r' % (interceptor, ))


class Registration(object):
    """An interceptor and the method names it applies to."""
    def __init__(self, hook, only=None, except_=None):
        self.hook = hook
        self.only = None if only is None else frozenset(only)
        self.except_ = None if except_ is None else frozenset(except_)

    def exempted(self, method_name):
        if self.only is not None:
            return method_name not in self.only

        if self.except_ is not None:
            return method_name in self.except_

        return False


class InterceptorChain(object):
    """Ordered before- and after-interceptors for one service class."""
    def __init__(self, before=(), after=()):
        self.before_interceptors = list(before)
        self.after_interceptors = list(after)

    def copy(self):
        return InterceptorChain(
            self.before_interceptors, self.after_interceptors)

    def _registrations(self, interceptors, only, except_):
        return [
            Registration(as_hook(interceptor), only, except_)
            for interceptor in interceptors]

    def append_before(self, *interceptors, only=None, except_=None):
        self.before_interceptors.extend(
            self._registrations(interceptors, only, except_))

    def prepend_before(self, *interceptors, only=None, except_=None):
        self.before_interceptors[0:0] = self._registrations(
            interceptors, only, except_)

    def append_after(self, *interceptors, only=None, except_=None):
        self.after_interceptors.extend(
            self._registrations(interceptors, only, except_))

    def prepend_after(self, *interceptors, only=None, except_=None):
        self.after_interceptors[0:0] = self._registrations(
            interceptors, only, except_)

    @gen.coroutine
    def run_before(self, service, method_name, args):
        """Run before-interceptors until one cancels. Returns a decision."""
        for registration in self.before_interceptors:
            if registration.exempted(method_name):
                continue

            result = yield resolve(
                registration.hook.evaluate(service, method_name, args))

            outcome = decision(result)
            if outcome.cancelled:
                return outcome

        return PROCEED

    @gen.coroutine
    def run_after(self, service, method_name, args, result):
        for registration in self.after_interceptors:
            if not registration.exempted(method_name):
                yield resolve(registration.hook.evaluate(
                    service, method_name, args, result))


class Service(object):
    """Base class for objects that implement an API.

    Subclasses set `web_service_api` and implement one method per API
    method. Interceptors registered on a subclass don't affect its bases.
    """
    web_service_api = None
    interceptors = InterceptorChain()

    @classmethod
    def _own_interceptors(cls):
        if 'interceptors' not in cls.__dict__:
            cls.interceptors = cls.interceptors.copy()

        return cls.interceptors

    @classmethod
    def before_invocation(cls, *interceptors, only=None, except_=None):
        cls._own_interceptors().append_before(
            *interceptors, only=only, except_=except_)

    append_before_invocation = before_invocation

    @classmethod
    def prepend_before_invocation(cls, *interceptors, only=None,
                                  except_=None):
        cls._own_interceptors().prepend_before(
            *interceptors, only=only, except_=except_)

    @classmethod
    def after_invocation(cls, *interceptors, only=None, except_=None):
        cls._own_interceptors().append_after(
            *interceptors, only=only, except_=except_)

    append_after_invocation = after_invocation

    @classmethod
    def prepend_after_invocation(cls, *interceptors, only=None,
                                 except_=None):
        cls._own_interceptors().prepend_after(
            *interceptors, only=only, except_=except_)

    def web_service_method(self, name):
        """The bound method implementing `name`, or None."""
        method = getattr(self, name, None)
        if method is None or not callable(method):
            return None

        return method

    @gen.coroutine
    def perform_invocation(self, method_name, params, on_cancel=None):
        """Run interceptors and the method, return the method's result.

        If a before-interceptor cancels with a reason, on_cancel(reason) is
        called. Either way a canceled call returns None.
        """
        outcome = yield self.interceptors.run_before(self, method_name, params)
        if outcome.cancelled:
            if outcome.reason is not None and on_cancel is not None:
                on_cancel(outcome.reason)

            return None

        method = self.web_service_method(method_name)
        result = yield resolve(method(*params))
        yield self.interceptors.run_after(self, method_name, params, result)
        return result
