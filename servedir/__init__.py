# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
servedir serves a directory tree over HTTP or HTTPS,
with optional directory listings, Basic authentication, CORS and cache headers, dotfile hiding,
and single-page application fallback.
'''

from .app import ServeApp
from .config import AuthConfig, ListenConfig, ServerConfig, TlsConfig


__all__ = ['AuthConfig', 'ListenConfig', 'ServeApp', 'ServerConfig', 'TlsConfig']
