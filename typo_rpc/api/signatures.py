"""Signature types: canonical descriptions of parameter and return types, and
   casting of wire values to and from them.

   A type tag is one of:

   - a scalar keyword: 'string', 'int', 'bool', 'float', 'time', 'binary'
     (or an alias, see _SCALAR_ALIASES)
   - a one-element list for a typed array: ['string'], [Article]
   - a Struct subclass
   - a Python class, e.g. str or datetime.datetime
   - a one-entry dict naming a parameter: {'postid': 'string'}
"""

import copy
import datetime
import xmlrpc.client
from collections import OrderedDict
from collections.abc import Mapping

import pytz

from typo_rpc.api.struct import Struct

__all__ = (
    'SignatureEntry', 'ScalarType', 'ListType', 'StructType',
    'canonical_signature_entry', 'infer_signature_entry', 'cast',
    'cast_expects', 'cast_returns', 'to_wire')

utc_tz = pytz.timezone('UTC')

SCALAR_KINDS = ('string', 'int', 'bool', 'float', 'time', 'binary')

_SCALAR_ALIASES = {
    'str': 'string',
    'text': 'string',
    'integer': 'int',
    'boolean': 'bool',
    'double': 'float',
    'datetime': 'time',
    'dateTime.iso8601': 'time',
    'base64': 'binary',
}


class SignatureEntry(object):
    """Base class for canonical type descriptions.

    `name` is the parameter name when the entry describes a parameter.
    """
    name = None

    def _key(self):
        raise NotImplementedError

    def __eq__(self, other):
        return type(self) is type(other) and self._key() == other._key()

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((type(self), self._key()))


class ScalarType(SignatureEntry):
    def __init__(self, kind, name=None):
        if kind not in SCALAR_KINDS:
            raise TypeError('%r is not a scalar type' % (kind, ))

        self.kind = kind
        self.name = name

    def _key(self):
        return self.kind

    def __repr__(self):
        return 'ScalarType(%r)' % self.kind


class ListType(SignatureEntry):
    def __init__(self, element, name=None):
        self.element = element
        self.name = name

    def _key(self):
        return self.element

    def __repr__(self):
        return 'ListType(%r)' % (self.element, )


class StructType(SignatureEntry):
    """A struct, or an untyped map when struct_class is None."""
    def __init__(self, struct_class, name=None):
        self.struct_class = struct_class
        self.name = name

    @property
    def fields(self):
        """Ordered mapping from member name to SignatureEntry."""
        if self.struct_class is None:
            return OrderedDict()

        return OrderedDict(
            (field_name, canonical_signature_entry(tag, i))
            for i, (field_name, tag)
            in enumerate(self.struct_class.members().items()))

    def _key(self):
        return self.struct_class

    def __repr__(self):
        name = self.struct_class.__name__ if self.struct_class else None
        return 'StructType(%s)' % name


def canonical_signature_entry(spec, position):
    """Make a SignatureEntry from a type tag.

    The entry is named after the parameter if spec is a one-entry dict,
    otherwise after its position.
    """
    name = 'param%d' % position
    if isinstance(spec, dict):
        if len(spec) != 1:
            raise TypeError(
                'Parameter declaration %r must have exactly one entry' % (
                    spec, ))

        ((name, spec), ) = spec.items()

    entry = _canonical_type(spec)
    entry.name = name
    return entry


def _canonical_type(spec):
    if isinstance(spec, SignatureEntry):
        return copy.copy(spec)

    if isinstance(spec, (list, tuple)):
        if len(spec) != 1:
            raise TypeError(
                'Array declaration %r must have exactly one element type' % (
                    spec, ))

        return ListType(_canonical_type(spec[0]))

    if isinstance(spec, str):
        kind = _SCALAR_ALIASES.get(spec, spec)
        return ScalarType(kind)

    if isinstance(spec, type):
        if issubclass(spec, Struct):
            return StructType(spec)

        # bool before int: bool is a subclass of int.
        for python_type, kind in _PYTHON_TYPES:
            if issubclass(spec, python_type):
                return ScalarType(kind)

        if issubclass(spec, (list, tuple)):
            return ListType(ScalarType('string'))

        if issubclass(spec, Mapping):
            return StructType(None)

    raise TypeError('%r is not a valid signature type' % (spec, ))


_PYTHON_TYPES = (
    (bool, 'bool'),
    (int, 'int'),
    (float, 'float'),
    (str, 'string'),
    (datetime.datetime, 'time'),
    (datetime.date, 'time'),
    (xmlrpc.client.DateTime, 'time'),
    (bytes, 'binary'),
    (bytearray, 'binary'),
    (xmlrpc.client.Binary, 'binary'),
)


def infer_signature_entry(value):
    """Guess a SignatureEntry from a value's runtime class.

    Used for return values of methods the API doesn't declare. Returns None
    for None.
    """
    if value is None:
        return None

    if isinstance(value, Struct):
        entry = StructType(type(value))
    elif isinstance(value, (list, tuple)):
        element = None
        if value:
            element = infer_signature_entry(value[0])

        entry = ListType(element or ScalarType('string'))
    else:
        entry = _canonical_type(type(value))

    entry.name = 'return'
    return entry


def _cast_string(value):
    if isinstance(value, bytes):
        return value.decode('utf-8')

    return str(value)


def _cast_int(value):
    if isinstance(value, str):
        return int(value.strip(), 10)

    return int(value)


def _cast_bool(value):
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('1', 'true'):
            return True

        if lowered in ('0', 'false', ''):
            return False

    return bool(value)


def _cast_float(value):
    return float(value)


_TIME_FORMATS = (
    '%Y%m%dT%H:%M:%S',
    '%Y%m%dT%H%M%S',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d',
)


def _cast_time(value):
    if isinstance(value, datetime.datetime):
        return value

    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)

    if isinstance(value, xmlrpc.client.DateTime):
        value = value.value

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.datetime.fromtimestamp(value, utc_tz)

    if isinstance(value, str):
        text = value.strip()
        is_utc = text.endswith('Z')
        if is_utc:
            text = text[:-1]

        for fmt in _TIME_FORMATS:
            try:
                parsed = datetime.datetime.strptime(text, fmt)
            except ValueError:
                continue

            return utc_tz.localize(parsed) if is_utc else parsed

    raise ValueError("Can't cast %r to a time" % (value, ))


def _cast_binary(value):
    if isinstance(value, xmlrpc.client.Binary):
        return value.data

    if isinstance(value, str):
        return value.encode('utf-8')

    return bytes(value)


_SCALAR_CASTS = {
    'string': _cast_string,
    'int': _cast_int,
    'bool': _cast_bool,
    'float': _cast_float,
    'time': _cast_time,
    'binary': _cast_binary,
}


def cast(value, entry):
    """Coerce value to the type entry describes.

    None is never coerced. Structs are built from mappings by matching keys
    to declared member names; unknown keys are dropped and missing members
    stay absent.
    """
    if value is None or entry is None:
        return value

    if isinstance(entry, ListType):
        if not isinstance(value, (list, tuple)):
            raise TypeError('Expected an array, got %r' % (value, ))

        return [cast(item, entry.element) for item in value]

    if isinstance(entry, StructType):
        return _cast_struct(value, entry)

    return _SCALAR_CASTS[entry.kind](value)


def _cast_struct(value, entry):
    struct_class = entry.struct_class
    if struct_class is None:
        if isinstance(value, Struct):
            return value.to_dict()

        if isinstance(value, Mapping):
            return dict(value)

        raise TypeError('Expected a struct, got %r' % (value, ))

    if isinstance(value, struct_class):
        return value

    if not isinstance(value, (Mapping, Struct)):
        raise TypeError(
            'Expected a %s struct, got %r' % (struct_class.__name__, value))

    instance = struct_class()
    for field_name, field_entry in entry.fields.items():
        if field_name in value:
            instance[field_name] = cast(value[field_name], field_entry)

    return instance


def cast_expects(params, entries):
    """Cast ordered parameters to the declared parameter types.

    Raises ValueError if the number of parameters is wrong.
    """
    if entries is None:
        return list(params)

    if len(params) != len(entries):
        raise ValueError(
            'Expected %d parameters, got %d' % (len(entries), len(params)))

    return [cast(param, entry) for param, entry in zip(params, entries)]


def cast_returns(value, entry):
    return cast(value, entry)


def to_wire(value, entry=None):
    """Convert a cast value to something xmlrpc.client can marshal.

    Structs become dicts in member order, times become DateTime (UTC when
    the time is timezone-aware), and bytes become Binary.
    """
    if value is None:
        return None

    if isinstance(value, Struct):
        # A plain dict: xmlrpc.client can't marshal dict subclasses.
        fields = StructType(type(value)).fields
        return dict(
            (name, to_wire(value[name], fields.get(name))) for name in value)

    if isinstance(value, (list, tuple)):
        element = entry.element if isinstance(entry, ListType) else None
        return [to_wire(item, element) for item in value]

    if isinstance(value, Mapping):
        return dict((key, to_wire(item)) for key, item in value.items())

    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(utc_tz).replace(tzinfo=None)

        return xmlrpc.client.DateTime(value)

    if isinstance(value, (bytes, bytearray)):
        return xmlrpc.client.Binary(bytes(value))

    return value
