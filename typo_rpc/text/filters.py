"""Text filters turn a post's source text into HTML.

MovableType clients list them with mt.supportedTextFilters and pick one per
post with the mt_convert_breaks field.
"""

from collections import OrderedDict

import markdown

__all__ = ('TextFilter', 'text_filters', 'find_text_filter')


class TextFilter(object):
    def __init__(self, name, description, fn):
        self.name = name
        self.description = description
        self.fn = fn

    def filter(self, text):
        return self.fn(text or '')

    def __repr__(self):
        return 'TextFilter(%r)' % self.name


def _markdown(text):
    return markdown.markdown(text, extensions=['fenced_code', 'extra'])


_filters = OrderedDict(
    (f.name, f) for f in [
        TextFilter('none', 'None', lambda text: text),
        TextFilter('markdown', 'Markdown', _markdown),
    ])


def text_filters():
    return list(_filters.values())


def find_text_filter(name):
    """The TextFilter called name, or None."""
    return _filters.get(name)
