# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from argparse import ArgumentParser, Namespace
from ipaddress import ip_address
from os.path import isfile
from sys import stderr

from starlette.middleware.gzip import GZipMiddleware
from starlette.types import ASGIApp

from .access_log import AccessLog
from .app import ServeApp
from .config import (is_serve_dbg, ListenConfig, parse_auth_arg, resolve_root, serve_host, serve_port, ServerConfig,
  TlsConfig)
from .logfmt import Logger
from .server import HttpServer


def main() -> None:
  parser = build_parser()
  args = parser.parse_args()
  try:
    config = server_config_from_args(args)
    listen = listen_config_from_args(args)
  except (OSError, ValueError) as e: # Includes ssl.SSLError.
    parser.error(str(e))

  log = Logger(None if args.quiet_all else stderr)
  access_log = AccessLog(None if (args.quiet or args.quiet_all) else stderr)
  app:ASGIApp = ServeApp(config, log=log, access_log=access_log)
  if args.compress: app = GZipMiddleware(app)

  server = HttpServer(app=app, listen=listen, label=config.root, log=log, dbg=is_serve_dbg())
  log(step='serve', root=config.root, url=server.url)
  server.run()


def build_parser() -> ArgumentParser:
  parser = ArgumentParser(prog='servedir', description='Serve files from a directory over HTTP or HTTPS.')
  parser.add_argument('root', default='.', nargs='?', help='Root directory to serve from.')
  parser.add_argument('-address', default=serve_host(), help='IP address to serve on (default: $SERVEDIR_HOST or 0.0.0.0).')
  parser.add_argument('-port', default=serve_port(), type=int, help='Port to serve on (default: $SERVEDIR_PORT or 8000).')
  parser.add_argument('-no-index', action='store_true', help='Disable automatic directory listing pages.')
  parser.add_argument('-dotfiles', action='store_true', help='Serve and list dotfiles.')
  parser.add_argument('-spa', action='store_true',
    help='Single-page application mode: serve /index.html for paths that are not found.')
  parser.add_argument('-no-cache', action='store_true', help='Send `Cache-Control: no-store` with every response.')
  parser.add_argument('-cors', nargs='?', const='*', default=None, metavar='ORIGIN',
    help='Enable CORS; the allowed origin defaults to `*`.')
  parser.add_argument('-auth', metavar='USER:PASS', help='Require HTTP Basic authentication.')
  parser.add_argument('-cert', help='Path of the TLS certificate (PEM); requires -key.')
  parser.add_argument('-key', help='Path of the TLS private key (PEM); requires -cert.')
  parser.add_argument('-compress', action='store_true', help='Enable gzip compression of responses.')
  parser.add_argument('-quiet', action='store_true', help='Disable the access log.')
  parser.add_argument('-quiet-all', action='store_true', help='Disable all output.')
  return parser


def server_config_from_args(args:Namespace) -> ServerConfig:
  return ServerConfig(
    root=resolve_root(args.root),
    show_index=(not args.no_index),
    show_dotfiles=args.dotfiles,
    spa_mode=args.spa,
    no_cache=args.no_cache,
    cors_origin=args.cors,
    auth=(parse_auth_arg(args.auth) if args.auth is not None else None))


def listen_config_from_args(args:Namespace) -> ListenConfig:
  ip_address(args.address) # Raises ValueError for an invalid address.
  if not (0 <= args.port <= 0xffff): raise ValueError(f'Invalid port: {args.port}')
  tls:TlsConfig|None = None
  if args.cert or args.key:
    if not (args.cert and args.key): raise ValueError('TLS requires both -cert and -key.')
    for path in (args.cert, args.key):
      if not isfile(path): raise ValueError(f'Parameter is not a file: {path!r}')
    tls = TlsConfig(cert_path=args.cert, key_path=args.key)
    tls.ssl_context() # Fail at startup on unreadable key material.
  return ListenConfig(host=args.address, port=args.port, tls=tls)


if __name__ == '__main__': main()
