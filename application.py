"""Main application entry point."""

import os
from trackhabit import create_app

app = create_app()

if __name__ == '__main__':
    host = os.environ.get('HOST', '127.0.0.1')
    port = int(os.environ.get('PORT', 5000))
    debug = os.environ.get('FLASK_ENV') == 'development'

    # The reloader would start a second process opening the same store
    app.run(host=host, port=port, debug=debug, use_reloader=False)
