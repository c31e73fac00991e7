"""
Development server for the MentorHub API.

    python run.py [port]

Host, port and debug mode come from HOST, PORT and FLASK_DEBUG; a port
given on the command line wins over PORT.
"""
import sys

from mentorhub import create_app
from mentorhub.utils.logger import logger

app = create_app()


def main(argv):
    port = int(argv[1]) if len(argv) > 1 else app.config['PORT']
    debug = app.config['DEBUG']
    logger.info(f"Serving MentorHub on {app.config['HOST']}:{port} (debug={debug})")
    app.run(host=app.config['HOST'], port=port, debug=debug, use_reloader=debug)


if __name__ == '__main__':
    main(sys.argv)
