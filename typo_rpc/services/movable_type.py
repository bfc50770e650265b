"""Implementation of the MovableType XML-RPC interface: categories, text
   filters and trackbacks.
"""

import bson.errors
from bson.objectid import ObjectId
from tornado import gen

from typo_rpc.api.base import API, api_method
from typo_rpc.api.struct import Struct, member
from typo_rpc.models import Category, EmbeddedCategory
from typo_rpc.services import BlogService
from typo_rpc.text import filters


class ArticleTitle(Struct):
    dateCreated = member('time')
    userid = member('string')
    postid = member('string')
    title = member('string')


class CategoryList(Struct):
    categoryId = member('string')
    categoryName = member('string')


class CategoryPerPost(Struct):
    categoryName = member('string')
    categoryId = member('string')
    isPrimary = member('bool')


class TextFilter(Struct):
    key = member('string')
    label = member('string')


class TrackBack(Struct):
    pingTitle = member('string')
    pingURL = member('string')
    pingIP = member('string')


class MovableTypeApi(API):
    inflect_names = False

    getCategoryList = api_method(
        expects=[
            {'blogid': 'string'}, {'username': 'string'},
            {'password': 'string'}],
        returns=[CategoryList])

    getPostCategories = api_method(
        expects=[
            {'postid': 'string'}, {'username': 'string'},
            {'password': 'string'}],
        returns=[CategoryPerPost])

    getRecentPostTitles = api_method(
        expects=[
            {'blogid': 'string'}, {'username': 'string'},
            {'password': 'string'}, {'numberOfPosts': 'int'}],
        returns=[ArticleTitle])

    setPostCategories = api_method(
        expects=[
            {'postid': 'string'}, {'username': 'string'},
            {'password': 'string'}, {'categories': [CategoryPerPost]}],
        returns='bool')

    supportedMethods = api_method(expects=[], returns=['string'])

    supportedTextFilters = api_method(expects=[], returns=[TextFilter])

    getTrackbackPings = api_method(
        expects=[{'postid': 'string'}],
        returns=[TrackBack])

    publishPost = api_method(
        expects=[
            {'postid': 'string'}, {'username': 'string'},
            {'password': 'string'}],
        returns='bool')


class MovableTypeService(BlogService):
    web_service_api = MovableTypeApi

    @gen.coroutine
    def getRecentPostTitles(self, blogid, username, password, numberOfPosts):
        posts = yield self.recent_posts(numberOfPosts)
        return [
            ArticleTitle(
                dateCreated=post.created_at,
                userid=str(blogid),
                postid=post.id,
                title=post.title)
            for post in posts]

    @gen.coroutine
    def getCategoryList(self, blogid, username, password):
        categories = yield self.all_categories()
        return [
            CategoryList(categoryId=category.id, categoryName=category.name)
            for category in categories]

    @gen.coroutine
    def getPostCategories(self, postid, username, password):
        post = yield self.find_post(postid)
        return [
            CategoryPerPost(
                categoryName=category.name,
                categoryId=category.category_id,
                isPrimary=category.is_primary)
            for category in post.categories]

    @gen.coroutine
    def setPostCategories(self, postid, username, password, categories):
        post = yield self.find_post(postid)
        embedded = []
        for item in categories or []:
            category = yield self._find_category(item['categoryId'])
            embedded.append(EmbeddedCategory.from_category(
                category, item.get('isPrimary')))

        post.categories = embedded
        yield self.save_post(post)
        return True

    def supportedMethods(self):
        return self.web_service_api.api_method_names()

    def supportedTextFilters(self):
        return [
            TextFilter(key=text_filter.name, label=text_filter.description)
            for text_filter in filters.text_filters()]

    @gen.coroutine
    def getTrackbackPings(self, postid):
        post = yield self.find_post(postid)
        return [
            TrackBack(
                pingTitle=trackback.title or '',
                pingURL=trackback.url or '',
                pingIP=trackback.ip or '')
            for trackback in post.trackbacks]

    @gen.coroutine
    def publishPost(self, postid, username, password):
        post = yield self.find_post(postid)
        post.publish()
        yield self.save_post(post)
        return True

    @gen.coroutine
    def _find_category(self, category_id):
        try:
            _id = ObjectId(category_id)
        except (bson.errors.InvalidId, TypeError):
            raise LookupError('Category %s not found' % category_id)

        doc = yield self.db.categories.find_one({'_id': _id})
        if not doc:
            raise LookupError('Category %s not found' % category_id)

        return Category.from_document(doc)


MovableTypeService.before_invocation(
    'authenticate',
    except_=['getTrackbackPings', 'supportedMethods', 'supportedTextFilters'])
