"""Implementation of the Blogger XML-RPC interface, which older clients use
   to list blogs and delete posts.
"""

from tornado import gen

from typo_rpc.api.base import API, api_method
from typo_rpc.api.struct import Struct, member
from typo_rpc.services import BlogService
from typo_rpc.services.meta_weblog import Article, MetaWeblogService
from typo_rpc.text import link


class Blog(Struct):
    url = member('string')
    blogid = member('string')
    blogName = member('string')


class User(Struct):
    userid = member('string')
    firstname = member('string')
    lastname = member('string')
    nickname = member('string')
    email = member('string')
    url = member('string')


class BloggerApi(API):
    inflect_names = False

    deletePost = api_method(
        expects=[
            {'appkey': 'string'}, {'postid': 'string'},
            {'username': 'string'}, {'password': 'string'},
            {'publish': 'bool'}],
        returns='bool')

    getUsersBlogs = api_method(
        expects=[
            {'appkey': 'string'}, {'username': 'string'},
            {'password': 'string'}],
        returns=[Blog])

    getUserInfo = api_method(
        expects=[
            {'appkey': 'string'}, {'username': 'string'},
            {'password': 'string'}],
        returns=User)

    newPost = api_method(
        expects=[
            {'appkey': 'string'}, {'blogid': 'string'},
            {'username': 'string'}, {'password': 'string'},
            {'content': 'string'}, {'publish': 'bool'}],
        returns='string')


class BloggerService(BlogService):
    web_service_api = BloggerApi

    @gen.coroutine
    def deletePost(self, appkey, postid, username, password, publish):
        yield self.delete_post(postid)
        return True

    def getUsersBlogs(self, appkey, username, password):
        # A single blog.
        return [Blog(
            url=link.blog_link(self.settings),
            blogid='1',
            blogName=self.settings.get('blog_name') or '')]

    def getUserInfo(self, appkey, username, password):
        return User(
            userid=username,
            firstname='',
            lastname='',
            nickname=username,
            email=self.settings.get('author_email') or '',
            url=link.blog_link(self.settings))

    @gen.coroutine
    def newPost(self, appkey, blogid, username, password, content, publish):
        # Blogger posts have no title, the content is the whole body.
        metaweblog = MetaWeblogService(self.db, self.settings)
        metaweblog.user = self.user
        postid = yield metaweblog.newPost(
            blogid, username, password, Article(description=content),
            publish)

        return postid


BloggerService.before_invocation('authenticate')
