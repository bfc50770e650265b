"""HTTP endpoints for the web services.

XmlRpcHandler serves POSTed XML-RPC calls. RSDHandler tells clients like
MarsEdit where the endpoint is and which APIs it speaks:
http://en.wikipedia.org/wiki/Really_Simple_Discovery

MediaHandler serves files uploaded with metaWeblog.newMediaObject.
"""

import tornado.template
import tornado.web
from tornado import gen

from typo_rpc.api.dispatcher import Dispatcher, LAYERED
from typo_rpc.text.link import absolute, blog_link

__all__ = ('XmlRpcHandler', 'RSDHandler', 'MediaHandler')


class XmlRpcHandler(tornado.web.RequestHandler):
    """Dispatch XML-RPC calls to the services in a ServiceRegistry.

    Mount with mode='layered' to route 'metaWeblog.getPost' by its prefix,
    or with mode='delegated' and a service_name group in the URL pattern.
    Faults are sent with status 200, as XML-RPC requires.
    """
    def initialize(self, registry, mode=LAYERED):
        self.registry = registry
        self.mode = mode

    @gen.coroutine
    def post(self, service_name=None):
        dispatcher = Dispatcher(
            self.registry,
            mode=self.mode,
            exception_reporting=self.settings.get('exception_reporting', True))

        response = yield dispatcher.dispatch_body(
            self.request.body, service_name=service_name)

        self.set_header('Content-Type', 'text/xml')
        self.write(response)


class RSDHandler(tornado.web.RequestHandler):
    """Link to this URL from your base template's <head>, e.g.:

       <link rel="EditURI" type="application/rsd+xml" title="RSD" href="{{ reverse_url('rsd') }}" />
    """
    def get(self):
        self.set_header('Content-Type', 'text/xml')
        t = tornado.template.Template(rsd_template)
        self.write(t.generate(
            blog_name=self.settings.get('blog_name') or '',
            home=blog_link(self.settings),
            api_link=absolute(self.settings, self.reverse_url('xmlrpc'))))


class MediaHandler(tornado.web.RequestHandler):
    """Serve an uploaded file's bytes from the `resources` collection.

    `path` is like '2024/01/image.png', as returned by newMediaObject.
    """
    def initialize(self, database):
        self.database = database

    @gen.coroutine
    def get(self, path):
        resource = yield self.database.resources.find_one({'path': path})
        if not resource:
            raise tornado.web.HTTPError(404)

        self.set_header(
            'Content-Type', resource.get('mime') or 'application/octet-stream')
        self.write(bytes(resource['content']))


rsd_template = """<?xml version="1.0" encoding="UTF-8"?>
<rsd version="1.0" xmlns="http://archipelago.phrasewise.com/rsd">
    <service>
        <engineName>{{ blog_name }}</engineName>
        <homePageLink>{{ home }}</homePageLink>
        <apis>
            <api name="MovableType" blogID="1" preferred="true"
                 apiLink="{{ api_link }}" />
            <api name="MetaWeblog" blogID="1" preferred="false"
                 apiLink="{{ api_link }}" />
            <api name="Blogger" blogID="1" preferred="false"
                 apiLink="{{ api_link }}" />
        </apis>
    </service>
</rsd>"""
