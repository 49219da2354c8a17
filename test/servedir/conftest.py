# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from asyncio import run as aio_run
from base64 import b64encode
from io import StringIO
from pathlib import Path
from typing import Any, Callable

import pytest
from starlette.testclient import TestClient

from servedir.access_log import AccessLog
from servedir.app import ServeApp
from servedir.config import AuthConfig, ServerConfig


def write_tree(root:Path, tree:dict[str,Any]) -> None:
  '''
  Create files and directories from a nested dict.
  String or bytes values are file contents; dict values are subdirectories.
  '''
  for name, val in tree.items():
    path = root / name
    if isinstance(val, dict):
      path.mkdir()
      write_tree(path, val)
    elif isinstance(val, bytes):
      path.write_bytes(val)
    else:
      path.write_text(val)


def basic_auth(username:str, password:str) -> dict[str,str]:
  token = b64encode(f'{username}:{password}'.encode()).decode('ascii')
  return {'Authorization': f'Basic {token}'}


@pytest.fixture
def site(tmp_path:Path) -> Path:
  root = tmp_path / 'site'
  root.mkdir()
  write_tree(root, {
    'a.txt': 'alpha\n',
    'b.txt': 'bravo\n',
    'A': {'inner.txt': 'inner\n'},
    'docs': {'index.html': '<h1>docs</h1>\n', 'other.txt': 'other\n'},
    '.secret': 'hidden\n',
    '.hidden_dir': {'x.txt': 'x\n'},
    'hello world.txt': 'spaces\n',
  })
  return root


@pytest.fixture
def make_app(site:Path) -> Callable[..., ServeApp]:
  def make_app(access_out:StringIO|None=None, **kwargs:Any) -> ServeApp:
    config = ServerConfig(root=str(site.resolve()), **kwargs)
    return ServeApp(config, access_log=AccessLog(access_out))
  return make_app


@pytest.fixture
def make_client(make_app:Callable[..., ServeApp]) -> Callable[..., TestClient]:
  def make_client(**kwargs:Any) -> TestClient:
    return TestClient(make_app(**kwargs))
  return make_client


@pytest.fixture
def user_pass_auth() -> AuthConfig:
  return AuthConfig.from_password('user', 'pass')


class RawResponse:
  def __init__(self) -> None:
    self.status = 0
    self.headers:dict[str,str] = {}
    self.body = b''


def asgi_request(app:Callable, path:str, method:str='GET', headers:dict[str,str]|None=None) -> RawResponse:
  '''
  Drive the ASGI app directly with an already-decoded path.
  This bypasses HTTP client URL normalization, which would otherwise collapse '..' segments before sending.
  '''
  scope = {
    'type': 'http',
    'asgi': {'version': '3.0'},
    'http_version': '1.1',
    'method': method,
    'scheme': 'http',
    'path': path,
    'raw_path': path.encode('utf-8'),
    'query_string': b'',
    'root_path': '',
    'headers': [(k.lower().encode('latin1'), v.encode('latin1')) for k, v in (headers or {}).items()],
    'client': ('127.0.0.1', 50000),
    'server': ('testserver', 80),
  }
  resp = RawResponse()

  async def receive() -> dict:
    return {'type': 'http.request', 'body': b'', 'more_body': False}

  async def send(message:dict) -> None:
    if message['type'] == 'http.response.start':
      resp.status = message['status']
      resp.headers = {k.decode('latin1').lower(): v.decode('latin1') for k, v in message['headers']}
    elif message['type'] == 'http.response.body':
      resp.body += message.get('body', b'')

  aio_run(app(scope, receive, send))
  return resp
