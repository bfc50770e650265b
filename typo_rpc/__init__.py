"""Remote-publishing web services for a blog: the MetaWeblog, MovableType and
   Blogger XML-RPC APIs, served by Tornado and stored in MongoDB.
"""

version = '0.1.0'
