import functools

import tornado.web

from typo_rpc.api.dispatcher import DELEGATED, LAYERED
from typo_rpc.api.handlers import MediaHandler, RSDHandler, XmlRpcHandler
from typo_rpc.api.registry import ServiceRegistry
from typo_rpc.services.blogger import BloggerService
from typo_rpc.services.meta_weblog import MetaWeblogService
from typo_rpc.services.movable_type import MovableTypeService


def get_url_spec(base_url):
    class U(tornado.web.URLSpec):
        def __init__(self, pattern, *args, **kwargs):
            """Include base_url in pattern"""
            prefix = '/' + base_url.strip('/') if base_url.strip('/') else ''
            super(U, self).__init__(
                prefix + '/' + pattern.lstrip('/'), *args, **kwargs)

    return U


def get_registry(db, settings):
    """A new service per request, sharing the database and settings."""
    registry = ServiceRegistry()
    registry.register(
        'metaWeblog', functools.partial(MetaWeblogService, db, settings))
    registry.register(
        'mt', functools.partial(MovableTypeService, db, settings))
    registry.register(
        'blogger', functools.partial(BloggerService, db, settings))
    return registry


def get_application(db, option_parser):
    settings = option_parser.as_dict()
    settings['db'] = db
    registry = get_registry(db, settings)
    U = get_url_spec(option_parser.base_url or '')

    urls = [
        U(r"rsd", RSDHandler, name='rsd'),
        U(r"backend/xmlrpc", XmlRpcHandler,
          {'registry': registry, 'mode': LAYERED}, name='xmlrpc'),
        U(r"backend/api/(?P<service_name>[^/]+)", XmlRpcHandler,
          {'registry': registry, 'mode': DELEGATED}, name='api'),
        U(r"files/(.+)", MediaHandler, {'database': db}, name='media'),
    ]

    return tornado.web.Application(urls, **settings)
