"""Blog web services: the MetaWeblog, MovableType and Blogger APIs."""

import logging
import xmlrpc.client

import bson.errors
from bson.objectid import ObjectId
from tornado import gen

from typo_rpc.api.invocation import Service
from typo_rpc.models import Category, EmbeddedCategory, Post


class BlogService(Service):
    """Base class for the blog's services.

    :Parameters:
      - `db`: a MotorDatabase
      - `settings`: the Application's settings, with the tornado.options
        values
    """
    def __init__(self, db, settings):
        self.db = db
        self.settings = settings
        self.user = None

    def authenticate(self, method_name, args):
        """Before-interceptor: check the call's username and password."""
        api_method = self.web_service_api.api_method_instance(method_name)
        params = api_method.expects_to_dict(args) if api_method else {}
        username = params.get('username')
        if (username != self.settings.get('user')
                or params.get('password') != self.settings.get('password')):
            logging.warning('Bad login for "%s" by %r', method_name, username)
            return [False, 'Invalid login']

        self.user = username
        return True

    @gen.coroutine
    def find_post(self, postid):
        """Load a Post by id, or raise a 404 Fault."""
        try:
            _id = ObjectId(postid)
        except (bson.errors.InvalidId, TypeError):
            raise xmlrpc.client.Fault(404, 'Not found')

        doc = yield self.db.posts.find_one({'_id': _id})
        if not doc:
            raise xmlrpc.client.Fault(404, 'Not found')

        return Post.from_document(doc)

    @gen.coroutine
    def recent_posts(self, number_of_posts):
        # _id starts with timestamp.
        cursor = self.db.posts.find()
        cursor.sort([('_id', -1)])
        if number_of_posts:
            cursor.limit(number_of_posts)

        docs = yield cursor.to_list(number_of_posts or None)
        return [Post.from_document(doc) for doc in docs]

    @gen.coroutine
    def all_categories(self):
        cursor = self.db.categories.find()
        cursor.sort([('name', 1)])
        docs = yield cursor.to_list(None)

        return [Category.from_document(doc) for doc in docs]

    @gen.coroutine
    def categories_named(self, names):
        """Embedded categories for the names that exist, in blog order."""
        categories = yield self.all_categories()
        return [
            EmbeddedCategory.from_category(category)
            for category in categories if category.name in names]

    @gen.coroutine
    def save_post(self, post):
        doc = post.to_document()
        _id = doc.pop('_id')
        result = yield self.db.posts.update_one({'_id': _id}, {'$set': doc})
        if result.matched_count != 1:
            raise xmlrpc.client.Fault(404, 'Not found')

    @gen.coroutine
    def delete_post(self, postid):
        post = yield self.find_post(postid)
        yield self.db.posts.delete_one({'_id': ObjectId(post.id)})
