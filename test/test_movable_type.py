import xmlrpc.client

from bson import ObjectId
from tornado.options import options as tornado_options

import test  # test/__init__.py.


class MovableTypeTest(test.TypoRpcTest):
    def credentials(self):
        return tornado_options.user, tornado_options.password

    def test_get_category_list(self):
        python_id = self.new_category('Python')
        tornado_id = self.new_category('Tornado')
        categories = self.fetch_rpc(
            'mt.getCategoryList', ('1', ) + self.credentials())

        self.assertEqual([
            {'categoryId': python_id, 'categoryName': 'Python'},
            {'categoryId': tornado_id, 'categoryName': 'Tornado'},
        ], categories)

    def test_post_categories(self):
        python_id = self.new_category('Python')
        tornado_id = self.new_category('Tornado')
        post_id = self.new_post(categories=['Python'])
        categories = self.fetch_rpc(
            'mt.getPostCategories', (post_id, ) + self.credentials())

        self.assertEqual([{
            'categoryName': 'Python',
            'categoryId': python_id,
            'isPrimary': False,
        }], categories)

        result = self.fetch_rpc(
            'mt.setPostCategories',
            (post_id, ) + self.credentials() + ([
                {'categoryId': tornado_id, 'isPrimary': True},
                {'categoryId': python_id},
            ], ))

        self.assertIs(True, result)
        categories = self.fetch_rpc(
            'mt.getPostCategories', (post_id, ) + self.credentials())

        self.assertEqual(
            [('Tornado', True), ('Python', False)],
            [(c['categoryName'], c['isPrimary']) for c in categories])

    def test_set_unknown_category(self):
        post_id = self.new_post()
        with self.assertRaises(xmlrpc.client.Fault) as context:
            self.fetch_rpc(
                'mt.setPostCategories',
                (post_id, ) + self.credentials() + ([
                    {'categoryId': str(ObjectId())},
                ], ))

        self.assertEqual(500, context.exception.faultCode)
        self.assertIn('not found', context.exception.faultString)

    def test_recent_post_titles(self):
        ids = [self.new_post(title='title %d' % i) for i in range(3)]
        titles = self.fetch_rpc(
            'mt.getRecentPostTitles', ('1', ) + self.credentials() + (2, ))

        self.assertEqual(
            [(ids[2], 'title 2'), (ids[1], 'title 1')],
            [(t['postid'], t['title']) for t in titles])

        self.assertEqual('1', titles[0]['userid'])
        self.assertIn('dateCreated', titles[0])

    def test_supported_methods(self):
        # No login needed.
        methods = self.fetch_rpc('mt.supportedMethods', ())
        self.assertEqual([
            'getCategoryList',
            'getPostCategories',
            'getRecentPostTitles',
            'setPostCategories',
            'supportedMethods',
            'supportedTextFilters',
            'getTrackbackPings',
            'publishPost',
        ], methods)

    def test_supported_text_filters(self):
        text_filters = self.fetch_rpc('mt.supportedTextFilters', ())
        self.assertEqual([
            {'key': 'none', 'label': 'None'},
            {'key': 'markdown', 'label': 'Markdown'},
        ], text_filters)

    def test_trackback_pings(self):
        post_id = self.new_post()
        self.assertEqual(
            [], self.fetch_rpc('mt.getTrackbackPings', (post_id, )))

        self.run_db(
            self.db.posts.update_one,
            {'_id': ObjectId(post_id)},
            {'$set': {'trackbacks': [{
                'title': 'a reply',
                'url': 'http://example.com/reply',
                'ip': '10.0.0.1',
                'blog_name': 'Example'}]}})

        self.assertEqual([{
            'pingTitle': 'a reply',
            'pingURL': 'http://example.com/reply',
            'pingIP': '10.0.0.1',
        }], self.fetch_rpc('mt.getTrackbackPings', (post_id, )))

    def test_publish_post(self):
        post_id = self.new_post(publish=False)
        result = self.fetch_rpc(
            'mt.publishPost', (post_id, ) + self.credentials())

        self.assertIs(True, result)
        doc = self.run_db(self.db.posts.find_one, {'_id': ObjectId(post_id)})
        self.assertTrue(doc['published'])
        self.assertIn('published_at', doc)

    def test_bad_login(self):
        with self.assertRaises(xmlrpc.client.Fault) as context:
            self.fetch_rpc(
                'mt.getCategoryList', ('1', 'admin', 'wrong password'))

        self.assertIn('Invalid login', context.exception.faultString)

    def test_delegated_endpoint(self):
        methods = self.fetch_rpc(
            'supportedMethods', (), url=self.reverse_url('api', 'mt'))

        self.assertIn('publishPost', methods)

    def test_multicall(self):
        post_id = self.new_post()
        calls = [
            {'methodName': 'mt.getPostCategories',
             'params': [post_id] + list(self.credentials())},
            {'methodName': 'mt.noSuchMethod', 'params': []},
            {'methodName': 'mt.getPostCategories',
             'params': [str(ObjectId())] + list(self.credentials())},
        ]

        results = self.fetch_rpc('system.multicall', (calls, ))
        self.assertEqual([[]], results[0])
        self.assertEqual(4, results[1]['faultCode'])
        self.assertEqual(
            {'faultCode': 3, 'faultString': 'Not found'}, results[2])
