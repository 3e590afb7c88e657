"""
Development server for the wristband monitor API.

Wristbands post to /api/data on this port; patient dashboards hold a
Socket.IO connection on the /dashboard namespace.
"""
import os
from wristband import create_app, socketio

app = create_app()


def _tls_context(production: bool):
    cert = os.getenv('SSL_CERT_PATH')
    key = os.getenv('SSL_KEY_PATH')
    if cert and key and os.path.isfile(cert) and os.path.isfile(key):
        return cert, key
    if production:
        raise RuntimeError('SSL_CERT_PATH and SSL_KEY_PATH must point at certificate files in production')
    return None


if __name__ == '__main__':
    production = os.getenv('FLASK_ENV') == 'production'
    socketio.run(
        app,
        host=os.getenv('FLASK_HOST', '0.0.0.0'),
        port=int(os.getenv('FLASK_PORT', 3000)),
        debug=not production,
        ssl_context=_tls_context(production),
        allow_unsafe_werkzeug=True,
        use_reloader=False,
    )
