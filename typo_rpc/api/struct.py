"""Structs: ordered, named-field values passed to and returned from API
   methods.

   Declare members in the class body, in wire order:

       class Url(Struct):
           url = member('string')

   A member's type is anything typo_rpc.api.signatures accepts as a type tag.
"""

from collections import OrderedDict

__all__ = ('Struct', 'member')


class member(object):
    """Declares one field of a Struct."""
    def __init__(self, type_):
        self.type = type_


class StructMeta(type):
    def __new__(mcs, name, bases, namespace):
        members = OrderedDict()
        for base in bases:
            members.update(getattr(base, '_members', {}))

        for key, value in list(namespace.items()):
            if isinstance(value, member):
                members[key] = value.type
                del namespace[key]

        namespace['_members'] = members
        return super(StructMeta, mcs).__new__(mcs, name, bases, namespace)


class Struct(metaclass=StructMeta):
    """A struct instance holds values for some or all of its members.

    Members never assigned are absent: they read as None but aren't iterated
    or sent over the wire. Keys that aren't declared members are ignored.
    """
    def __init__(self, values=None, **kwargs):
        object.__setattr__(self, '_values', {})
        if values is not None:
            for key in values.keys():
                self[key] = values[key]

        for key, value in kwargs.items():
            self[key] = value

    @classmethod
    def members(cls):
        """Member names and their declared type tags, in declared order."""
        return OrderedDict(cls._members)

    def __getattr__(self, name):
        if name in type(self)._members:
            return self._values.get(name)

        raise AttributeError(name)

    def __setattr__(self, name, value):
        if name in type(self)._members:
            self._values[name] = value
        else:
            object.__setattr__(self, name, value)

    def __getitem__(self, name):
        if name not in self._members:
            raise KeyError(name)

        return self._values.get(name)

    def __setitem__(self, name, value):
        if name in self._members:
            self._values[name] = value

    def __delitem__(self, name):
        self._values.pop(name, None)

    def __contains__(self, name):
        return name in self._values

    def __iter__(self):
        return (name for name in self._members if name in self._values)

    def __len__(self):
        return len(self._values)

    def __eq__(self, other):
        return type(self) is type(other) and self._values == other._values

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def get(self, name, default=None):
        return self._values.get(name, default)

    def keys(self):
        return list(self)

    def values(self):
        return [self._values[name] for name in self]

    def items(self):
        return [(name, self._values[name]) for name in self]

    def to_dict(self):
        return OrderedDict(self.items())

    def __repr__(self):
        return '%s(%s)' % (
            type(self).__name__,
            ', '.join('%s=%r' % item for item in self.items()))
