import logging

import pymongo
from tornado import gen


@gen.coroutine
def ensure_indexes(db, drop=False):
    if drop:
        logging.info('Dropping indexes...')
        yield db.posts.drop_indexes()
        yield db.categories.drop_indexes()
        yield db.resources.drop_indexes()

    logging.info('Ensuring indexes...')

    yield db.categories.create_index(
        [('name', pymongo.ASCENDING)], unique=True)
    yield db.posts.create_index([('slug', pymongo.ASCENDING)])
    yield db.posts.create_index([
        ('published', pymongo.ASCENDING),
        ('published_at', pymongo.DESCENDING)])
    yield db.posts.create_index(
        [('categories.category_id', pymongo.ASCENDING)])
    yield db.resources.create_index(
        [('path', pymongo.ASCENDING)], unique=True)

    logging.info('    done.')
