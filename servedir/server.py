# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from asyncio import run as aio_run
from typing import Any

import uvicorn
from starlette.types import ASGIApp

from .config import ListenConfig
from .logfmt import Logger


class HttpServer:
  '''
  HttpServer serves an ASGI application over HTTP/1.1, or HTTPS when TLS material is configured.
  The transport is uvicorn; its own access log is disabled because the application records each request itself.
  '''

  def __init__(self, *, app:ASGIApp, listen:ListenConfig, label:str='', log:Logger|None=None, dbg:bool=False) -> None:
    self.app = app
    self.listen = listen
    self.label = label
    self.log = log or Logger()
    self.dbg = dbg
    self.uv_server:uvicorn.Server|None = None


  @property
  def url(self) -> str:
    'The URL to advertise. The wildcard address is shown as the loopback address.'
    host = self.listen.host
    if host in ('0.0.0.0', ''): host = '127.0.0.1'
    elif host == '::': host = '::1'
    if ':' in host: host = f'[{host}]'
    return f'{self.listen.scheme}://{host}:{self.listen.port}/'


  def uvicorn_config(self) -> uvicorn.Config:
    '''
    Build the uvicorn configuration.
    If TLS is configured, the certificate chain and key are loaded first so that errors surface before binding.
    '''
    ssl_args:dict[str,Any] = {}
    if tls := self.listen.tls:
      tls.ssl_context()
      ssl_args = dict(ssl_certfile=tls.cert_path, ssl_keyfile=tls.key_path)

    return uvicorn.Config(
      self.app,
      host=self.listen.host,
      port=self.listen.port,
      lifespan='off',
      access_log=False,
      log_level=('debug' if self.dbg else 'warning'),
      server_header=False,
      **ssl_args)


  async def serve_forever(self) -> None:
    if self.uv_server is not None: raise RuntimeError('Server already started.')
    self.uv_server = uvicorn.Server(self.uvicorn_config())
    self.log(step='start', label=self.label, url=self.url)
    await self.uv_server.serve()
    self.log(step='stop', label=self.label)


  def close(self) -> None:
    if uv_server := self.uv_server:
      uv_server.should_exit = True


  def run(self) -> None:
    try: aio_run(self.serve_forever())
    except KeyboardInterrupt:
      if self.dbg: raise
      exit('\nKeyboard interrupt.')
