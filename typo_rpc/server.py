#!/usr/bin/env python
from functools import partial
import logging

import tornado.ioloop
from motor.motor_tornado import MotorClient
from tornado import httpserver
from tornado.options import options as opts

from typo_rpc import application, indexes
from typo_rpc.options import define_options


def main():
    define_options(opts)
    opts.parse_command_line()
    for handler in logging.getLogger().handlers:
        if hasattr(handler, 'baseFilename'):
            print('Logging to', handler.baseFilename)
            break

    db = MotorClient(opts.mongo_uri).get_default_database()
    loop = tornado.ioloop.IOLoop.current()

    if opts.rebuild_indexes or opts.ensure_indexes:
        ensure_indexes = partial(indexes.ensure_indexes,
                                 db,
                                 drop=opts.rebuild_indexes)

        loop.run_sync(ensure_indexes)

    app = application.get_application(db, opts)
    http_server = httpserver.HTTPServer(app, xheaders=True)
    http_server.listen(opts.port)
    msg = 'Listening on port %s' % opts.port
    print(msg)
    logging.info(msg)
    loop.start()


if __name__ == "__main__":
    main()
