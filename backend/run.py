"""
Flask development server entry point.
"""
import os
from app import create_app

app = create_app()

if __name__ == '__main__':
    host = os.getenv('FLASK_HOST', '127.0.0.1')
    port = int(os.getenv('FLASK_PORT', 5000))
    debug = os.getenv('FLASK_ENV') != 'production'

    ssl_context = None
    cert_path = os.getenv('SSL_CERT_PATH')
    key_path = os.getenv('SSL_KEY_PATH')
    if cert_path and key_path:
        ssl_context = (cert_path, key_path)

    app.run(host=host, port=port, debug=debug, ssl_context=ssl_context)
