# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
The request pipeline, as an ASGI application.

Every request passes through the same ordered stages:
* resolve the path beneath the root (escaping the root is always 404);
* deny dotfiles unless they are enabled (403, connection closed, no other headers);
* check Basic credentials if authentication is enabled (401);
* dispatch on the target kind: file, directory (index.html or listing), or missing (SPA fallback or 404);
* add the cache and CORS headers.
Each request is recorded in the access log once the response has been sent.
'''

from io import BufferedReader
from os import fstat
from os.path import isfile, join as path_join
from time import perf_counter, time as unix_time
from typing import cast
from urllib.parse import quote as url_quote

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Message, Receive, Scope, Send

from .access_log import AccessLog, AccessLogRecord
from .auth import AuthDecision, authorize, www_authenticate_value
from .config import ServerConfig
from .filetypes import guess_media_type
from .http import (FORBIDDEN, format_header_date, Forbidden, html_media_type, INTERNAL_SERVER_ERROR, METHOD_NOT_ALLOWED,
  NotFound, OK, ResponseError, served_methods, UNAUTHORIZED)
from .listing import breadcrumb_segments, Listing, listing_title, render_error_body, render_listing, RenderError, scan_listing
from .logfmt import Logger, null_logger
from .resolve import resolve_target, TargetKind


class OpenFileResponse(Response):
  '''
  A response that streams the contents of an already open file.
  Opening the file before the response starts means that a file that disappears after resolution
  is reported as a 404 rather than failing mid-response.
  `Content-Length` and `Last-Modified` are taken from the open file descriptor.
  '''

  chunk_size = 1<<16

  def __init__(self, file:BufferedReader, *, media_type:str, status_code:int=OK.value) -> None:
    self.file = file
    self.status_code = status_code
    self.media_type = media_type
    self.background = None
    st = fstat(file.fileno())
    self.init_headers({'Content-Length': str(st.st_size), 'Last-Modified': format_header_date(st.st_mtime)})


  async def __call__(self, scope:Scope, receive:Receive, send:Send) -> None:
    try:
      await send({'type': 'http.response.start', 'status': self.status_code, 'headers': self.raw_headers})
      if scope['method'] != 'HEAD':
        while chunk := await run_in_threadpool(self.file.read, self.chunk_size):
          await send({'type': 'http.response.body', 'body': chunk, 'more_body': True})
      await send({'type': 'http.response.body', 'body': b'', 'more_body': False})
    except OSError: pass # The client went away; stop writing.
    finally:
      self.file.close()


class ServeApp:
  '''
  Serve the contents of `config.root`.
  The configuration is read-only; one ServeApp instance is shared by all concurrent requests.
  '''

  def __init__(self, config:ServerConfig, *, log:Logger=null_logger, access_log:AccessLog|None=None) -> None:
    self.config = config
    self.log = log
    self.access_log = access_log or AccessLog(None)


  async def __call__(self, scope:Scope, receive:Receive, send:Send) -> None:
    '''
    The ASGI application interface.
    '''
    match scope['type']:
      case 'http': await self.handle_http(scope, receive, send)
      case 'lifespan': await self.handle_lifespan(receive, send)
      case 'websocket': await send({'type': 'websocket.close', 'code': 1000})
      case other: raise ValueError(f'unsupported ASGI scope type: {other!r}')


  async def handle_lifespan(self, receive:Receive, send:Send) -> None:
    while True:
      message = await receive()
      match message['type']:
        case 'lifespan.startup': await send({'type': 'lifespan.startup.complete'})
        case 'lifespan.shutdown':
          await send({'type': 'lifespan.shutdown.complete'})
          return


  async def handle_http(self, scope:Scope, receive:Receive, send:Send) -> None:
    timestamp = unix_time()
    start = perf_counter()
    latency_ms:float|None = None

    async def send_timed(message:Message) -> None:
      nonlocal latency_ms
      if message['type'] == 'http.response.start': latency_ms = (perf_counter() - start) * 1000
      await send(message)

    request = Request(scope, receive)
    status = INTERNAL_SERVER_ERROR.value
    try:
      response = await run_in_threadpool(self.respond, request)
      status = response.status_code
      await response(scope, receive, send_timed)
    finally:
      if latency_ms is None: latency_ms = (perf_counter() - start) * 1000
      client = scope.get('client')
      self.access_log.record(AccessLogRecord(timestamp=timestamp, peer=(client[0] if client else '-'),
        method=request.method, status=status, latency_ms=latency_ms, path=request_path(scope)))


  def respond(self, request:Request) -> Response:
    '''
    Run the pipeline for a single request, converting `ResponseError` into a response and shaping the headers.
    This performs blocking filesystem calls and is run on the thread pool.
    '''
    try: response = self.handle_request(request)
    except ResponseError as e:
      if e.reason: self.log(step='respond', path=request_path(request.scope), status=e.status.value, reason=e.reason)
      response = Response(status_code=e.status.value, headers=e.headers)
    self.fill_response_headers(request, response)
    if request.method == 'HEAD' and not isinstance(response, OpenFileResponse):
      response.body = b'' # Keep the Content-Length computed for the GET body.
    return response


  def handle_request(self, request:Request) -> Response:
    if request.method not in served_methods:
      raise ResponseError(METHOD_NOT_ALLOWED, headers={'Allow': 'GET, HEAD'})

    config = self.config
    target = resolve_target(config.root, request_path(request.scope))

    if target.is_traversal: raise NotFound('path escapes root')

    if target.is_dotfile and not config.show_dotfiles: raise Forbidden('dotfile')

    if authorize(config.auth, request.headers.get('Authorization')) is AuthDecision.DENY:
      raise ResponseError(UNAUTHORIZED, headers={'WWW-Authenticate': www_authenticate_value})

    match target.kind:
      case TargetKind.FILE: return self.serve_file(target.fs_path)
      case TargetKind.DIRECTORY: return self.serve_directory(request, target.fs_path)
      case TargetKind.MISSING: return self.serve_fallback()


  def fill_response_headers(self, request:Request, response:Response) -> None:
    '''
    Add the configured cache and CORS headers.
    Policy denials (403) are left with only their `Connection: close` header.
    '''
    if response.status_code == FORBIDDEN: return
    if self.config.no_cache:
      response.headers['Cache-Control'] = 'no-store'
    if self.config.cors_origin is not None:
      response.headers['Access-Control-Allow-Origin'] = self.config.cors_origin


  def serve_file(self, local_path:str, media_type:str='') -> Response:
    '''
    Open a local file and return a response that streams it.
    A file that vanished or became unreadable since it was resolved is a 404.
    '''
    try: file = open(local_path, 'rb')
    except OSError as e: raise NotFound(f'cannot open file: {e!r}') from e
    assert isinstance(file, BufferedReader)
    return OpenFileResponse(file, media_type=(media_type or guess_media_type(local_path)))


  def serve_directory(self, request:Request, local_path:str) -> Response:
    index_path = path_join(local_path, 'index.html')
    if isfile(index_path):
      return self.serve_file(index_path, media_type=html_media_type)
    if not self.config.show_index: raise NotFound()
    return self.list_directory(request, local_path)


  def serve_fallback(self) -> Response:
    'Handle a path that does not resolve to anything.'
    if self.config.spa_mode:
      index_path = path_join(self.config.root, 'index.html')
      if isfile(index_path):
        return self.serve_file(index_path, media_type=html_media_type)
    raise NotFound()


  def list_directory(self, request:Request, local_path:str) -> Response:
    '''
    Produce a directory listing html page (absent index.html).
    If the template fails to render, the page degrades to a fixed error string rather than failing the request.
    '''
    try: dirs, files = scan_listing(local_path, show_dotfiles=self.config.show_dotfiles, log=self.log)
    except OSError as e:
      self.log(step='list_dir', dir=local_path, exc=repr(e))
      raise NotFound('listing unavailable') from e

    segments = breadcrumb_segments(request_raw_path(request.scope))
    listing = Listing(title=listing_title(segments), segments=segments, dirs=dirs, files=files)
    try: body = render_listing(listing)
    except RenderError as e:
      self.log(step='render_listing', dir=local_path, exc=str(e))
      body = render_error_body
    return Response(content=body, media_type=html_media_type)


def request_path(scope:Scope) -> str:
  'The percent-decoded request path.'
  return cast(str, scope['path'])


def request_raw_path(scope:Scope) -> str:
  'The request path as sent by the client, still percent-encoded.'
  raw_path = scope.get('raw_path')
  if raw_path: return raw_path.decode('latin1').partition('?')[0]
  return url_quote(request_path(scope))
