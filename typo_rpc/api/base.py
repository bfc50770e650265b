"""API definitions: the static registry of a service's remote methods.

   class CalculatorApi(API):
       inflect_names = False

       add = api_method(expects=[{'a': 'int'}, {'b': 'int'}], returns='int')

   Methods are registered once, when the class is created, in declaration
   order. A method's public name is the name clients call; by default it's
   the camelized attribute name unless inflect_names is False.
"""

from collections import OrderedDict

from typo_rpc.api import signatures

__all__ = ('API', 'MethodDescriptor', 'api_method')


class api_method(object):
    """Declares a remote method in an API class body."""
    def __init__(self, expects=None, returns=None, public_name=None):
        self.expects = expects
        self.returns = returns
        self.public_name = public_name


class MethodDescriptor(object):
    """Describes one remote method.

    `expects` is the ordered list of parameter SignatureEntries, or None if
    the parameters were never declared. `returns` is a SignatureEntry or None
    for a method with no return value.
    """
    def __init__(self, name, public_name, expects=None, returns=None):
        self.name = name
        self.public_name = public_name
        if expects is None:
            self.expects = None
        else:
            self.expects = [
                signatures.canonical_signature_entry(spec, i)
                for i, spec in enumerate(expects)]

        if returns is None:
            self.returns = None
        else:
            self.returns = signatures.canonical_signature_entry(
                {'return': returns}, 0)

    @property
    def param_names(self):
        return [entry.name for entry in self.expects or []]

    def cast_expects(self, params):
        return signatures.cast_expects(params, self.expects)

    def cast_returns(self, value):
        return signatures.cast_returns(value, self.returns)

    def expects_to_dict(self, params):
        """Map ordered params to the declared parameter names."""
        return OrderedDict(zip(self.param_names, params))

    def __repr__(self):
        return 'MethodDescriptor(%r, public_name=%r)' % (
            self.name, self.public_name)


def inflect(name):
    """'get_recent_posts' -> 'GetRecentPosts'"""
    return ''.join(part[:1].upper() + part[1:] for part in name.split('_'))


class APIMeta(type):
    def __new__(mcs, name, bases, namespace):
        declared = [
            (key, value) for key, value in namespace.items()
            if isinstance(value, api_method)]

        for key, _ in declared:
            del namespace[key]

        cls = super(APIMeta, mcs).__new__(mcs, name, bases, namespace)
        cls._api_methods = OrderedDict()
        cls._public_names = {}
        for base in bases:
            for descriptor in getattr(base, '_api_methods', {}).values():
                cls._register(descriptor)

        for key, declaration in declared:
            cls.add_api_method(
                key,
                expects=declaration.expects,
                returns=declaration.returns,
                public_name=declaration.public_name)

        return cls

    def __str__(cls):
        return cls.__name__


class API(metaclass=APIMeta):
    """Base class for API definitions.

    Set `default_api_method` to the name of a service method that handles
    calls to public names the API doesn't declare.
    """
    inflect_names = True
    default_api_method = None

    @classmethod
    def add_api_method(cls, name, expects=None, returns=None,
                       public_name=None):
        if public_name is None:
            public_name = inflect(name) if cls.inflect_names else name

        descriptor = MethodDescriptor(name, public_name, expects, returns)
        cls._register(descriptor)
        return descriptor

    @classmethod
    def _register(cls, descriptor):
        existing = cls._public_names.get(descriptor.public_name)
        if existing is not None and existing != descriptor.name:
            raise ValueError(
                'Public name %r is already declared by %s.%s' % (
                    descriptor.public_name, cls.__name__, existing))

        cls._api_methods[descriptor.name] = descriptor
        cls._public_names[descriptor.public_name] = descriptor.name

    @classmethod
    def api_methods(cls):
        """Ordered mapping from method name to MethodDescriptor."""
        return OrderedDict(cls._api_methods)

    @classmethod
    def api_method_names(cls):
        return list(cls._api_methods)

    @classmethod
    def has_api_method(cls, name):
        return name in cls._api_methods

    @classmethod
    def has_public_api_method(cls, public_name):
        return public_name in cls._public_names

    @classmethod
    def public_api_method_name(cls, public_name):
        return cls._public_names.get(public_name)

    @classmethod
    def api_method_instance(cls, name):
        return cls._api_methods.get(name)

    @classmethod
    def public_api_method_instance(cls, public_name):
        name = cls._public_names.get(public_name)
        if name is None:
            return None

        return cls._api_methods[name]

    @classmethod
    def default_api_method_instance(cls):
        """A descriptor for the default method, or None if there's none.

        The default method's parameters and return type are undeclared unless
        it's also registered as an API method.
        """
        name = cls.default_api_method
        if name is None:
            return None

        if name in cls._api_methods:
            return cls._api_methods[name]

        return MethodDescriptor(name, name)
