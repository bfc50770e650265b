"""Implementation of the metaWeblog XML-RPC interface, with the MovableType
   extensions to the post struct.

   See http://xmlrpc.scripting.com/metaWeblogApi.html
"""

import datetime
import logging

from tornado import gen

from typo_rpc.api.base import API, api_method
from typo_rpc.api.struct import Struct, member
from typo_rpc.models import Post, Resource, utc_naive
from typo_rpc.services import BlogService
from typo_rpc.text import filters, link, slugify


class Article(Struct):
    description = member('string')
    title = member('string')
    postid = member('string')
    url = member('string')
    link = member('string')
    permaLink = member('string')
    categories = member(['string'])
    mt_text_more = member('string')
    mt_excerpt = member('string')
    mt_keywords = member('string')
    mt_allow_comments = member('int')
    mt_allow_pings = member('int')
    mt_convert_breaks = member('string')
    mt_tb_ping_urls = member(['string'])
    dateCreated = member('time')


class MediaObject(Struct):
    bits = member('binary')
    name = member('string')
    type = member('string')


class Url(Struct):
    url = member('string')


class MetaWeblogApi(API):
    inflect_names = False

    getCategories = api_method(
        expects=[
            {'blogid': 'string'}, {'username': 'string'},
            {'password': 'string'}],
        returns=['string'])

    getPost = api_method(
        expects=[
            {'postid': 'string'}, {'username': 'string'},
            {'password': 'string'}],
        returns=Article)

    getRecentPosts = api_method(
        expects=[
            {'blogid': 'string'}, {'username': 'string'},
            {'password': 'string'}, {'numberOfPosts': 'int'}],
        returns=[Article])

    deletePost = api_method(
        expects=[
            {'appkey': 'string'}, {'postid': 'string'},
            {'username': 'string'}, {'password': 'string'},
            {'publish': 'int'}],
        returns='bool')

    editPost = api_method(
        expects=[
            {'postid': 'string'}, {'username': 'string'},
            {'password': 'string'}, {'struct': Article}, {'publish': 'int'}],
        returns='bool')

    newPost = api_method(
        expects=[
            {'blogid': 'string'}, {'username': 'string'},
            {'password': 'string'}, {'struct': Article}, {'publish': 'int'}],
        returns='string')

    newMediaObject = api_method(
        expects=[
            {'blogid': 'string'}, {'username': 'string'},
            {'password': 'string'}, {'data': MediaObject}],
        returns=Url)


class MetaWeblogService(BlogService):
    web_service_api = MetaWeblogApi

    @gen.coroutine
    def getCategories(self, blogid, username, password):
        categories = yield self.all_categories()
        return [category.name for category in categories]

    @gen.coroutine
    def getPost(self, postid, username, password):
        post = yield self.find_post(postid)
        return self.article_dto_from(post)

    @gen.coroutine
    def getRecentPosts(self, blogid, username, password, numberOfPosts):
        posts = yield self.recent_posts(numberOfPosts)
        return [self.article_dto_from(post) for post in posts]

    @gen.coroutine
    def newPost(self, blogid, username, password, struct, publish):
        now = datetime.datetime.utcnow()
        post = Post({
            'author': username, 'user': self.user, 'created_at': now})
        self._apply_struct(post, struct, publish, username)
        if post.published and not post.published_at:
            post.published_at = now

        if struct.get('categories'):
            post.categories = yield self.categories_named(
                struct['categories'])

        doc = post.to_document()
        result = yield self.db.posts.insert_one(doc)
        logging.info('New post %s "%s"', result.inserted_id, post.title)
        return str(result.inserted_id)

    @gen.coroutine
    def editPost(self, postid, username, password, struct, publish):
        post = yield self.find_post(postid)
        self._apply_struct(post, struct, publish, username)
        if post.published and not post.published_at:
            post.published_at = datetime.datetime.utcnow()

        if struct.get('categories') is not None:
            post.categories = yield self.categories_named(
                struct['categories'])

        if struct.get('mt_tb_ping_urls'):
            logging.info(
                'Post %s trackback URLs: %s',
                postid, ', '.join(struct['mt_tb_ping_urls']))

        yield self.save_post(post)
        return True

    @gen.coroutine
    def deletePost(self, appkey, postid, username, password, publish):
        yield self.delete_post(postid)
        return True

    @gen.coroutine
    def newMediaObject(self, blogid, username, password, data):
        now = datetime.datetime.utcnow()
        content = data['bits'] or b''
        resource = Resource({
            'filename': data['name'],
            'path': link.media_link(now.year, now.month, data['name']),
            'mime': data['type'],
            'size': len(content),
            'created_at': now})

        doc = resource.to_document()
        doc['content'] = content
        yield self.db.resources.insert_one(doc)
        return Url(url=link.file_link(self.settings, resource.path))

    def _apply_struct(self, post, struct, publish, username):
        """Copy a metaWeblog post struct's fields to post."""
        settings = self.settings
        post.body = struct.get('description') or ''
        post.title = struct.get('title') or ''
        post.author = username
        if not post.slug:
            post.slug = slugify.slugify(post.title)

        post.published = bool(publish)
        date_created = struct.get('dateCreated')
        if date_created:
            post.published_at = utc_naive(date_created)

        allow_comments = struct.get('mt_allow_comments')
        if allow_comments is None:
            allow_comments = settings.get('default_allow_comments', True)
        post.allow_comments = bool(allow_comments)

        allow_pings = struct.get('mt_allow_pings')
        if allow_pings is None:
            allow_pings = settings.get('default_allow_pings', True)
        post.allow_pings = bool(allow_pings)

        post.extended = struct.get('mt_text_more') or ''
        post.excerpt = struct.get('mt_excerpt') or ''
        post.set_keywords(struct.get('mt_keywords'))

        text_filter = filters.find_text_filter(
            struct.get('mt_convert_breaks')
            or settings.get('text_filter') or 'none')
        post.text_filter = text_filter.name if text_filter else 'none'
        if struct.get('mt_tb_ping_urls'):
            post.pings = list(struct['mt_tb_ping_urls'])

        post.render()

    def article_dto_from(self, post):
        url = link.post_link(self.settings, post)
        return Article(
            description=post.body,
            title=post.title,
            postid=post.id,
            url=url,
            link=url,
            permaLink=url,
            categories=[category.name for category in post.categories],
            mt_text_more=post.extended or '',
            mt_excerpt=post.excerpt or '',
            mt_keywords=', '.join(post.keywords),
            mt_allow_comments=1 if post.allow_comments else 0,
            mt_allow_pings=1 if post.allow_pings else 0,
            mt_convert_breaks=post.text_filter or '',
            mt_tb_ping_urls=list(post.pings),
            dateCreated=post.published_at or post.created_at)


MetaWeblogService.before_invocation('authenticate')
