"""URLs for posts, categories and uploaded files.

Functions take the application settings, which hold the tornado.options
values (see typo_rpc.options).
"""


def media_link(year, month, filename):
    return '%04d/%02d/%s' % (year, month, filename)


def absolute(settings, relative):
    if settings.get('debug'):
        prefix = 'http://%s:%s' % (settings['host'], settings['port'])
    else:
        prefix = 'http://%s' % settings['host']
    return '%s/%s' % (prefix, relative.lstrip('/'))


def _base(settings):
    base_url = (settings.get('base_url') or '').strip('/')
    return '/' + base_url + '/' if base_url else '/'


def post_link(settings, post):
    """Permalink like http://host/blog/2024/01/31/the-title"""
    date = post.published_at or post.created_at
    return absolute(settings, '%s%04d/%02d/%02d/%s' % (
        _base(settings), date.year, date.month, date.day, post.slug))


def category_link(settings, category):
    return absolute(
        settings, '%scategory/%s' % (_base(settings), category.slug))


def file_link(settings, path):
    return absolute(settings, '%sfiles/%s' % (_base(settings), path))


def blog_link(settings):
    """The blog's home page, like http://host/blog/"""
    return absolute(settings, _base(settings))
