import xmlrpc.client

import mock
from mongomock_motor import AsyncMongoMockClient
from tornado.options import options as tornado_options
from tornado.testing import AsyncHTTPTestCase

from typo_rpc import application
from typo_rpc.options import define_options

define_options(tornado_options)


class TypoRpcTest(AsyncHTTPTestCase):
    def setUp(self):
        self.patchers = []
        self.set_option('host', 'localhost')
        self.set_option('blog_name', 'My Test Blog')
        self.set_option('base_url', 'test-blog')
        self.set_option('author_email', 't.j.author@example.com')
        self.set_option('user', 'admin')
        self.set_option('password', 'password')
        self.set_option('text_filter', 'markdown')
        self.set_option('exception_reporting', True)
        self.db = AsyncMongoMockClient()['test_typo']

        # Sets self.__port, and sets self._app = self.get_app().
        super(TypoRpcTest, self).setUp()

    def tearDown(self):
        for patcher in reversed(self.patchers):
            patcher.stop()

        super(TypoRpcTest, self).tearDown()

    def set_option(self, name, value):
        patcher = mock.patch.object(tornado_options.mockable(), name, value)
        patcher.start()

        # So we can reverse it in tearDown.
        self.patchers.append(patcher)

    def get_app(self):
        return application.get_application(self.db, tornado_options)

    def reverse_url(self, name, *args):
        return self._app.reverse_url(name, *args)

    def run_db(self, fn, *args, **kwargs):
        """Run a Motor method to completion, return its result."""
        return self.io_loop.run_sync(lambda: fn(*args, **kwargs))

    def fetch_xml(self, body, url=None):
        response = self.fetch(
            url or self.reverse_url('xmlrpc'), method='POST', body=body)

        self.assertEqual(200, response.code)
        self.assertEqual('text/xml', response.headers['Content-Type'])
        return response.body

    def fetch_rpc(self, method_name, args, url=None):
        """Call a method in our XML-RPC API, return the result.

        Raises xmlrpc.client.Fault if the server returns a fault.
        """
        body = xmlrpc.client.dumps(tuple(args), method_name, allow_none=True)
        (data, ), _ = xmlrpc.client.loads(
            self.fetch_xml(body, url), use_builtin_types=True)

        return data

    def new_category(self, name):
        result = self.run_db(
            self.db.categories.insert_one,
            {'name': name, 'slug': name.lower()})

        return str(result.inserted_id)

    def new_post(
            self,
            title='the title',
            description='the body',
            publish=True,
            **extra):
        """Create a post with metaWeblog.newPost and return its id"""
        payload = {
            'title': title,
            'description': description,
            'mt_keywords': 'a tag, another tag',
        }
        payload.update(extra)
        return self.fetch_rpc('metaWeblog.newPost', (
            '1',  # Blog id, always 1.
            tornado_options.user,
            tornado_options.password,
            payload,
            publish))
