import datetime
import xmlrpc.client
from urllib.parse import urlsplit

from bson import ObjectId
from tornado.options import options as tornado_options

import test  # test/__init__.py.


class MetaWeblogTest(test.TypoRpcTest):
    def get_post(self, post_id):
        return self.fetch_rpc(
            'metaWeblog.getPost',
            (
                post_id,
                tornado_options.user,
                tornado_options.password))

    def post_doc(self, post_id):
        return self.run_db(
            self.db.posts.find_one, {'_id': ObjectId(post_id)})

    def test_new_post(self):
        start = datetime.datetime.utcnow().replace(microsecond=0)
        post_id = self.new_post(
            title='the title',
            description='the *body*',
            mt_excerpt='the excerpt',
            mt_text_more='more')

        end = datetime.datetime.utcnow()
        post = self.get_post(post_id)
        url = 'http://localhost/test-blog/%s/the-title' % (
            post['dateCreated'].strftime('%Y/%m/%d'))

        self.assertEqual(post_id, post['postid'])
        self.assertEqual('the title', post['title'])
        self.assertEqual('the *body*', post['description'])
        self.assertEqual('the excerpt', post['mt_excerpt'])
        self.assertEqual('more', post['mt_text_more'])
        self.assertEqual('a tag, another tag', post['mt_keywords'])
        self.assertEqual('markdown', post['mt_convert_breaks'])
        self.assertEqual(1, post['mt_allow_comments'])
        self.assertEqual(1, post['mt_allow_pings'])
        self.assertEqual([], post['categories'])
        self.assertEqual(url, post['link'])
        self.assertEqual(url, post['permaLink'])
        self.assertEqual(url, post['url'])
        self.assertTrue(
            start <= post['dateCreated'] <= end,
            "Post's dateCreated %s isn't between %s and %s" % (
                post['dateCreated'], start, end))

        doc = self.post_doc(post_id)
        self.assertEqual('the-title', doc['slug'])
        self.assertEqual(['a tag', 'another tag'], doc['keywords'])
        self.assertTrue(doc['published'])
        self.assertEqual('admin', doc['author'])
        self.assertIn('<em>body</em>', doc['html'])
        self.assertIn('more', doc['html'])

    def test_new_draft(self):
        post_id = self.new_post(publish=False)
        doc = self.post_doc(post_id)
        self.assertFalse(doc['published'])
        self.assertNotIn('published_at', doc)

    def test_date_created(self):
        when = datetime.datetime(2014, 1, 2, 3, 4, 5)
        post_id = self.new_post(dateCreated=xmlrpc.client.DateTime(when))
        post = self.get_post(post_id)
        self.assertEqual(when, post['dateCreated'])
        self.assertTrue(post['link'].endswith('/2014/01/02/the-title'))

    def test_date_created_utc(self):
        # Many clients mark times as UTC with a trailing Z.
        body = '''<?xml version="1.0"?>
<methodCall>
<methodName>metaWeblog.newPost</methodName>
<params>
<param><value><string>1</string></value></param>
<param><value><string>%s</string></value></param>
<param><value><string>%s</string></value></param>
<param><value><struct>
<member><name>title</name><value><string>the title</string></value></member>
<member><name>description</name><value><string>the body</string></value>
</member>
<member><name>dateCreated</name>
<value><dateTime.iso8601>20240101T10:00:00Z</dateTime.iso8601></value>
</member>
</struct></value></param>
<param><value><boolean>1</boolean></value></param>
</params>
</methodCall>''' % (tornado_options.user, tornado_options.password)

        (post_id, ), _ = xmlrpc.client.loads(
            self.fetch_xml(body.encode('utf-8')))

        when = datetime.datetime(2024, 1, 1, 10, 0)
        self.assertEqual(when, self.post_doc(post_id)['published_at'])
        self.assertEqual(when, self.get_post(post_id)['dateCreated'])

    def test_text_filter_none(self):
        post_id = self.new_post(
            description='the *body*', mt_convert_breaks='none')

        self.assertEqual('the *body*', self.post_doc(post_id)['html'])
        self.assertEqual('none', self.get_post(post_id)['mt_convert_breaks'])

    def test_allow_comments_and_pings(self):
        post_id = self.new_post(mt_allow_comments=0, mt_allow_pings=0)
        post = self.get_post(post_id)
        self.assertEqual(0, post['mt_allow_comments'])
        self.assertEqual(0, post['mt_allow_pings'])

    def test_categories(self):
        self.new_category('Tornado')
        self.new_category('Python')
        categories = self.fetch_rpc(
            'metaWeblog.getCategories',
            (
                '1',
                tornado_options.user,
                tornado_options.password))

        self.assertEqual(['Python', 'Tornado'], categories)

        post_id = self.new_post(categories=['Tornado', 'Nonexistent'])
        self.assertEqual(['Tornado'], self.get_post(post_id)['categories'])

    def test_edit_post(self):
        self.new_category('Python')
        post_id = self.new_post(title='old title', publish=False)
        result = self.fetch_rpc(
            'metaWeblog.editPost',
            (
                post_id,
                tornado_options.user,
                tornado_options.password,
                {
                    'title': 'new title',
                    'description': 'new body',
                    'mt_keywords': 'one',
                    'categories': ['Python'],
                    'mt_tb_ping_urls': ['http://example.com/trackback'],
                },
                True))

        self.assertIs(True, result)
        post = self.get_post(post_id)
        self.assertEqual('new title', post['title'])
        self.assertEqual('new body', post['description'])
        self.assertEqual('one', post['mt_keywords'])
        self.assertEqual(['Python'], post['categories'])
        self.assertEqual(
            ['http://example.com/trackback'], post['mt_tb_ping_urls'])

        doc = self.post_doc(post_id)

        # The slug doesn't change, so links to the post keep working.
        self.assertEqual('old-title', doc['slug'])
        self.assertTrue(doc['published'])
        self.assertIn('published_at', doc)

    def test_edit_unpublishes(self):
        post_id = self.new_post()
        self.fetch_rpc(
            'metaWeblog.editPost',
            (
                post_id,
                tornado_options.user,
                tornado_options.password,
                {'title': 'the title', 'description': 'the body'},
                False))

        self.assertFalse(self.post_doc(post_id)['published'])

    def test_delete_post(self):
        post_id = self.new_post()
        result = self.fetch_rpc(
            'metaWeblog.deletePost',
            (
                '',
                post_id,
                tornado_options.user,
                tornado_options.password,
                True))

        self.assertIs(True, result)
        self.assertIsNone(self.post_doc(post_id))

    def test_not_found(self):
        for post_id in (str(ObjectId()), 'garbage'):
            with self.assertRaises(xmlrpc.client.Fault) as context:
                self.get_post(post_id)

            self.assertEqual(404, context.exception.faultCode)

    def test_recent_posts(self):
        ids = [self.new_post(title='title %d' % i) for i in range(3)]
        posts = self.fetch_rpc(
            'metaWeblog.getRecentPosts',
            (
                '1',
                tornado_options.user,
                tornado_options.password,
                2))

        self.assertEqual(
            [ids[2], ids[1]], [post['postid'] for post in posts])

        posts = self.fetch_rpc(
            'metaWeblog.getRecentPosts',
            (
                '1',
                tornado_options.user,
                tornado_options.password,
                10))

        self.assertEqual(3, len(posts))

    def test_new_media_object(self):
        bits = b'\x89PNG\r\n\x1a\n'
        now = datetime.datetime.utcnow()
        response = self.fetch_rpc(
            'metaWeblog.newMediaObject',
            (
                '1',
                tornado_options.user,
                tornado_options.password,
                {
                    'name': 'image.png',
                    'bits': xmlrpc.client.Binary(bits),
                    'type': 'image/png'}))

        path = '%04d/%02d/image.png' % (now.year, now.month)
        self.assertEqual(
            'http://localhost/test-blog/files/' + path, response['url'])

        doc = self.run_db(self.db.resources.find_one, {'path': path})
        self.assertEqual(bits, doc['content'])
        self.assertEqual('image/png', doc['mime'])
        self.assertEqual(len(bits), doc['size'])

        # The returned URL serves the file.
        response = self.fetch(urlsplit(response['url']).path)
        self.assertEqual(200, response.code)
        self.assertEqual('image/png', response.headers['Content-Type'])
        self.assertEqual(bits, response.body)

    def test_media_not_found(self):
        response = self.fetch('/test-blog/files/2024/01/nothing.png')
        self.assertEqual(404, response.code)

    def test_bad_login(self):
        with self.assertRaises(xmlrpc.client.Fault) as context:
            self.fetch_rpc(
                'metaWeblog.getCategories',
                ('1', tornado_options.user, 'wrong password'))

        self.assertEqual(400, context.exception.faultCode)
        self.assertEqual(
            'request canceled: Invalid login', context.exception.faultString)

    def test_delegated_endpoint(self):
        self.new_category('Python')
        categories = self.fetch_rpc(
            'getCategories',
            ('1', tornado_options.user, tornado_options.password),
            url=self.reverse_url('api', 'metaWeblog'))

        self.assertEqual(['Python'], categories)
