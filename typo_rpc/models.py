"""MongoDB documents for posts, categories and uploaded files."""

import datetime

from bson.objectid import ObjectId
from schematics.models import Model
from schematics.types import (
    BooleanType, DateTimeType, IntType, StringType)
from schematics.types.compound import ListType, ModelType

import pytz

from typo_rpc.text import filters, slugify

utc_tz = pytz.timezone('UTC')


def utc_naive(dt):
    """Convert a datetime to naive UTC, the way MongoDB stores it."""
    if dt is not None and dt.tzinfo is not None:
        dt = dt.astimezone(utc_tz).replace(tzinfo=None)
    return dt


class BlogDocument(Model):
    """A document in a MongoDB collection.

    `id` is the string form of the document's ObjectId.
    """
    id = StringType()

    @classmethod
    def from_document(cls, doc):
        data = dict(doc)
        if '_id' in data:
            data['id'] = str(data.pop('_id'))
        return cls(data, strict=False)

    def to_document(self):
        doc = dict(
            (key, value) for key, value in self.to_native().items()
            if value is not None)

        _id = doc.pop('id', None)
        if _id:
            doc['_id'] = ObjectId(_id)
        return doc


class Category(BlogDocument):
    name = StringType(default='')
    slug = StringType(default='')
    description = StringType(default='')

    @classmethod
    def named(cls, name):
        return cls({'name': name, 'slug': slugify.slugify(name)})


class EmbeddedCategory(Model):
    """A post's link to a category."""
    category_id = StringType()
    name = StringType(default='')
    is_primary = BooleanType(default=False)

    @classmethod
    def from_category(cls, category, is_primary=False):
        return cls({
            'category_id': category.id,
            'name': category.name,
            'is_primary': bool(is_primary)})


class Trackback(Model):
    title = StringType(default='')
    url = StringType(default='')
    ip = StringType(default='')
    blog_name = StringType(default='')


class Post(BlogDocument):
    """A blog article."""
    title = StringType(default='')
    # Source text and its continuation, as the client sent them.
    body = StringType(default='')
    extended = StringType(default='')
    # body and extended, run through the text filter.
    html = StringType(default='')
    excerpt = StringType(default='')
    keywords = ListType(StringType(), default=list)
    author = StringType(default='')
    user = StringType()
    published = BooleanType(default=False)
    allow_comments = BooleanType(default=True)
    allow_pings = BooleanType(default=True)
    text_filter = StringType(default='none')
    categories = ListType(ModelType(EmbeddedCategory), default=list)
    trackbacks = ListType(ModelType(Trackback), default=list)
    # URLs this post pinged, from mt_tb_ping_urls.
    pings = ListType(StringType(), default=list)
    slug = StringType(default='')
    published_at = DateTimeType()
    created_at = DateTimeType()

    def render(self):
        """Set html from body and extended with the post's text filter."""
        text_filter = (
            filters.find_text_filter(self.text_filter)
            or filters.find_text_filter('none'))

        self.html = text_filter.filter(
            '\n\n'.join(part for part in (self.body, self.extended) if part))

    def set_keywords(self, text):
        """Set tags from a comma-separated string like 'a, b'."""
        self.keywords = [
            tag.strip() for tag in (text or '').split(',') if tag.strip()]

    def publish(self):
        self.published = True
        if not self.published_at:
            self.published_at = datetime.datetime.utcnow()

    @property
    def primary_category(self):
        for category in self.categories:
            if category.is_primary:
                return category
        return None


class Resource(BlogDocument):
    """An uploaded file. Its bytes are stored in the `content` field of the
    MongoDB document, not in the model.
    """
    filename = StringType(default='')
    path = StringType(default='')
    mime = StringType(default='')
    size = IntType(default=0)
    created_at = DateTimeType()
