"""WSGI entry point.

    flask --app wsgi run
    gunicorn wsgi:app
"""

import os
from cakesbuy import create_app

app = create_app(os.environ.get('FLASK_CONFIG', 'development'))


if __name__ == '__main__':
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
